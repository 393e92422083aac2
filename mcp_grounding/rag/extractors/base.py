"""Abstract base class for file text extractors."""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from ...config.logging import LoggerMixin
from ...core.exceptions import ExtractionError


class TextExtractorBase(ABC, LoggerMixin):
    """Reads one file format and returns its text."""

    format_name: str = "text"

    async def extract(self, file_path: Union[str, Path]) -> str:
        """Extract the text of a file without blocking the event loop."""
        path = Path(file_path)
        self.logger.info("Extracting text", file_path=str(path), format=self.format_name)

        try:
            loop = asyncio.get_event_loop()
            text = await loop.run_in_executor(None, self._read, path)
        except Exception as e:
            self.logger.error("Failed to extract text", file_path=str(path), error=str(e))
            raise ExtractionError(f"Failed to read {self.format_name} file: {e}", str(path))

        self.logger.info("Text extracted", file_path=str(path), char_count=len(text))
        return text

    @abstractmethod
    def _read(self, path: Path) -> str:
        """Blocking read of the file's text."""
        pass
