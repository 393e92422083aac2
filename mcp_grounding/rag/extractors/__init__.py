"""Text extraction from source files."""

from .base import TextExtractorBase
from .files import PdfExtractor, TextExtractor, XlsxExtractor
from .source import SourceExtractor, is_excluded

__all__ = [
    "TextExtractorBase",
    "TextExtractor",
    "PdfExtractor",
    "XlsxExtractor",
    "SourceExtractor",
    "is_excluded",
]
