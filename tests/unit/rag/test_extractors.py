"""Tests for file extraction and directory walking."""

from pathlib import Path

import pytest
from openpyxl import Workbook

from mcp_grounding.core.exceptions import ExtractionError
from mcp_grounding.models.rag import ChunkingMode
from mcp_grounding.rag.extractors import (
    PdfExtractor,
    SourceExtractor,
    TextExtractor,
    XlsxExtractor,
    is_excluded,
)


class TestExclusion:
    """Test exclusion glob matching."""

    @pytest.mark.parametrize("path,patterns,expected", [
        ("app.log", ["**/*.log"], True),
        ("logs/app.log", ["**/*.log"], True),
        ("temp/notes.txt", ["**/temp/**"], True),
        ("docs/temp/notes.txt", ["**/temp/**"], True),
        ("docs/temporary.txt", ["**/temp/**"], False),
        ("docs/readme.md", ["**/*.log", "**/temp/**"], False),
        ("docs/readme.md", [], False),
        ("build/out.js", ["build/*"], True),
        ("readme.txt", ["*.txt"], True),
        ("notes/readme.txt", ["*.txt"], False),
        ("docs/a/b.md", ["docs/*"], False),
        ("docs/a/b.md", ["docs/**"], True),
        ("app.log", ["*.{log,tmp}"], True),
        ("cache/x.tmp", ["**/*.{log,tmp}"], True),
        ("cache/x.txt", ["**/*.{log,tmp}"], False),
        (".cache/x.log", ["**/*.log"], True),
    ])
    def test_patterns(self, path: str, patterns, expected: bool):
        assert is_excluded(path, patterns) is expected


class TestFileExtractors:
    """Test the per-format extractors."""

    @pytest.mark.asyncio
    async def test_text_extractor_reads_utf8(self, temp_dir: Path):
        path = temp_dir / "note.txt"
        path.write_text("Grüße aus Köln", encoding="utf-8")

        assert await TextExtractor().extract(path) == "Grüße aus Köln"

    @pytest.mark.asyncio
    async def test_text_extractor_wraps_errors(self, temp_dir: Path):
        with pytest.raises(ExtractionError):
            await TextExtractor().extract(temp_dir / "missing.txt")

    @pytest.mark.asyncio
    async def test_xlsx_extractor_tab_joins_rows(self, temp_dir: Path):
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "People"
        sheet.append(["Name", "Role"])
        sheet.append(["Alice", "Engineer"])
        sheet.append(["Bob", None])
        path = temp_dir / "people.xlsx"
        workbook.save(path)

        text = await XlsxExtractor().extract(path)

        assert text.splitlines() == [
            "=== Sheet: People ===",
            "Name\tRole",
            "Alice\tEngineer",
            "Bob\t",
        ]

    @pytest.mark.asyncio
    async def test_pdf_extractor_rejects_invalid_file(self, temp_dir: Path):
        path = temp_dir / "broken.pdf"
        path.write_bytes(b"not a pdf at all")

        with pytest.raises(ExtractionError):
            await PdfExtractor().extract(path)


class TestSourceExtractor:
    """Test source-level extraction."""

    @pytest.fixture
    def extractor(self) -> SourceExtractor:
        return SourceExtractor()

    def test_extractor_selection(self, extractor: SourceExtractor):
        assert extractor.extractor_for("a.pdf") is extractor.pdf_extractor
        assert extractor.extractor_for("a.XLSX") is extractor.xlsx_extractor
        assert extractor.extractor_for("a.md") is extractor.text_extractor
        assert extractor.extractor_for("a.png") is None

    @pytest.mark.asyncio
    async def test_extract_file_sets_mode_and_source(self, extractor: SourceExtractor, temp_dir: Path):
        path = temp_dir / "README.md"
        path.write_text("## Title\n\nBody text.", encoding="utf-8")

        document = await extractor.extract_file(path)

        assert document.mode is ChunkingMode.MARKDOWN
        assert document.source == "README.md"
        assert document.text.startswith("## Title")

    @pytest.mark.asyncio
    async def test_unsupported_file_is_skipped(self, extractor: SourceExtractor, temp_dir: Path):
        path = temp_dir / "photo.jpg"
        path.write_bytes(b"\xff\xd8\xff")

        assert await extractor.extract_file(path) is None

    @pytest.mark.asyncio
    async def test_unreadable_file_is_skipped(self, extractor: SourceExtractor, temp_dir: Path):
        path = temp_dir / "binary.txt"
        path.write_bytes(b"\xff\xfe\xfa\xc3\x28")

        assert await extractor.extract_file(path) is None

    @pytest.mark.asyncio
    async def test_list_files_prunes_excluded_directories(self, extractor: SourceExtractor, docs_tree: Path):
        files = await extractor.list_files(docs_tree, ["**/*.log", "**/temp/**"])

        relative = sorted(path.relative_to(docs_tree).as_posix() for path in files)
        assert relative == ["faq.txt", "guide/install.md"]

    @pytest.mark.asyncio
    async def test_extract_directory(self, extractor: SourceExtractor, docs_tree: Path):
        documents = await extractor.extract_directory(docs_tree, ["**/temp/**"])

        # server.log has no supported extension and is skipped anyway
        assert sorted(d.source for d in documents) == ["faq.txt", "guide/install.md"]
