"""Extractors for plain text, PDF and XLSX files."""

from pathlib import Path

from openpyxl import load_workbook
from pypdf import PdfReader

from .base import TextExtractorBase


class TextExtractor(TextExtractorBase):
    """UTF-8 text and source code files."""

    format_name = "text"

    def _read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")


class PdfExtractor(TextExtractorBase):
    """Text layer of PDF documents, page by page."""

    format_name = "pdf"

    def _read(self, path: Path) -> str:
        reader = PdfReader(path)
        pages = []
        for page in reader.pages:
            text = page.extract_text()
            if text and text.strip():
                pages.append(text.strip())
        return "\n\n".join(pages)


class XlsxExtractor(TextExtractorBase):
    """Spreadsheets, one tab-separated line per row."""

    format_name = "xlsx"

    def _read(self, path: Path) -> str:
        workbook = load_workbook(path, read_only=True, data_only=True)
        try:
            sheets = []
            for sheet_name in workbook.sheetnames:
                rows = []
                for row in workbook[sheet_name].iter_rows(values_only=True):
                    cells = ["" if value is None else str(value) for value in row]
                    rows.append("\t".join(cells))
                sheets.append(f"=== Sheet: {sheet_name} ===\n" + "\n".join(rows))
        finally:
            workbook.close()

        return "\n\n".join(sheets)
