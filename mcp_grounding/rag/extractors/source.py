"""Turns source paths (files or directory trees) into extracted documents."""

import asyncio
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

from wcmatch import glob

from ...config.logging import LoggerMixin
from ...core.exceptions import ExtractionError
from ...models.rag import ExtractedDocument
from ..chunking.modes import infer_chunking_mode
from .base import TextExtractorBase
from .files import PdfExtractor, TextExtractor, XlsxExtractor

EXCLUDE_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB | glob.FORCEUNIX


def is_excluded(relative_path: str, patterns: Iterable[str]) -> bool:
    """Match a POSIX path relative to the source root against exclusion globs.

    ``*`` stays within one path segment, ``**`` spans any number of
    directories (none included) and braces expand, so ``**/*.{log,tmp}``
    excludes both ``app.log`` and ``cache/x.tmp``.
    """
    patterns = list(patterns)
    if not patterns:
        return False
    return glob.globmatch(relative_path, patterns, flags=EXCLUDE_FLAGS)


def _raise_walk_error(error: OSError) -> None:
    raise error


class SourceExtractor(LoggerMixin):
    """Extracts documents from a single file or a directory tree."""

    def __init__(
        self,
        text_extractor: Optional[TextExtractorBase] = None,
        pdf_extractor: Optional[TextExtractorBase] = None,
        xlsx_extractor: Optional[TextExtractorBase] = None,
    ) -> None:
        self.text_extractor = text_extractor or TextExtractor()
        self.pdf_extractor = pdf_extractor or PdfExtractor()
        self.xlsx_extractor = xlsx_extractor or XlsxExtractor()

    def extractor_for(self, path: Union[str, Path]) -> Optional[TextExtractorBase]:
        """Pick the extractor for a file, or None if its format is unsupported."""
        if infer_chunking_mode(path) is None:
            return None
        suffix = Path(path).suffix.lower()
        if suffix == ".pdf":
            return self.pdf_extractor
        if suffix == ".xlsx":
            return self.xlsx_extractor
        return self.text_extractor

    async def extract_file(
        self,
        file_path: Union[str, Path],
        source: Optional[str] = None,
    ) -> Optional[ExtractedDocument]:
        """Extract one file.

        Returns None when the format is unsupported or the file cannot be
        read; both cases are logged and never raised.
        """
        path = Path(file_path)
        mode = infer_chunking_mode(path)
        extractor = self.extractor_for(path)
        if mode is None or extractor is None:
            self.logger.debug("Unsupported file format, skipping", file_path=str(path))
            return None

        try:
            text = await extractor.extract(path)
        except ExtractionError as e:
            self.logger.warning("Skipping unreadable file", file_path=str(path), error=str(e))
            return None

        return ExtractedDocument(text=text, mode=mode, source=source or path.name)

    async def list_files(
        self,
        root: Union[str, Path],
        exclude_patterns: Optional[List[str]] = None,
    ) -> List[Path]:
        """Recursively list the files under root that are not excluded.

        Excluded directories are not descended into. Traversal errors
        propagate to the caller.
        """
        root = Path(root)
        patterns = list(exclude_patterns or [])
        loop = asyncio.get_event_loop()
        files = await loop.run_in_executor(None, self._walk, root, patterns)
        self.logger.info("Directory listed", root=str(root), files=len(files), exclude=patterns)
        return files

    async def extract_directory(
        self,
        root: Union[str, Path],
        exclude_patterns: Optional[List[str]] = None,
    ) -> List[ExtractedDocument]:
        """Extract every supported, non-excluded file under root."""
        root = Path(root)
        documents = []
        for path in await self.list_files(root, exclude_patterns):
            document = await self.extract_file(path, source=relative_source(root, path))
            if document is not None:
                documents.append(document)

        self.logger.info("Directory extracted", root=str(root), total_documents=len(documents))
        return documents

    def _walk(self, root: Path, patterns: List[str]) -> List[Path]:
        files: List[Path] = []
        for current, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            current_path = Path(current)
            kept_dirs = []
            for dirname in dirnames:
                relative_dir = relative_source(root, current_path / dirname)
                # trailing slash lets "**/temp/**" prune the directory itself
                if is_excluded(relative_dir, patterns) or is_excluded(relative_dir + "/", patterns):
                    self.logger.debug("Skipping excluded directory", path=str(current_path / dirname))
                else:
                    kept_dirs.append(dirname)
            dirnames[:] = kept_dirs

            for filename in filenames:
                path = current_path / filename
                if is_excluded(relative_source(root, path), patterns):
                    self.logger.debug("Skipping excluded file", path=str(path))
                    continue
                files.append(path)
        return files


def relative_source(root: Path, path: Path) -> str:
    """POSIX path of a file relative to the source root."""
    return path.relative_to(root).as_posix()
