"""Mode-aware text chunking."""

import re
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import ConfigurationError
from ...models.rag import Chunk, ChunkingMode
from .text import DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH, fingerprint, is_valid

_BLANK_LINES = re.compile(r"\n\s*\n")
_SECTION_HEADING = re.compile(r"^(#{2,3})\s+\S")
_FENCE = ("```", "~~~")

# Characters per extra token when estimating the size of a code block
CODE_CHARS_PER_TOKEN = 50


def estimate_tokens(text: str) -> float:
    """Rough token estimate that accounts for dense code."""
    return len(text.split()) + len(text) / CODE_CHARS_PER_TOKEN


def sliding_window(words: Sequence[str], size: int, overlap: int) -> List[str]:
    """Join words into windows of `size`, each starting `size - overlap` after the previous."""
    pieces: List[str] = []
    start = 0
    while start < len(words):
        end = min(start + size, len(words))
        pieces.append(" ".join(words[start:end]))
        if end >= len(words):
            break
        start = end - overlap
    return pieces


class Chunker(LoggerMixin):
    """Splits raw text into valid, fingerprinted chunks."""

    def __init__(
        self,
        chunk_size: int = 100,
        overlap: int = 50,
        min_length: int = DEFAULT_MIN_LENGTH,
        max_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self._check_window(chunk_size, overlap)
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.min_length = min_length
        self.max_length = max_length

    @classmethod
    def from_settings(cls, settings: Settings) -> "Chunker":
        """Create a chunker configured from settings."""
        return cls(
            chunk_size=settings.CHUNK_SIZE,
            overlap=settings.CHUNK_OVERLAP,
            min_length=settings.MIN_CHUNK_LENGTH,
            max_length=settings.MAX_CHUNK_LENGTH,
        )

    @staticmethod
    def _check_window(chunk_size: int, overlap: int) -> None:
        if chunk_size < 1:
            raise ConfigurationError("Chunk size must be positive", "CHUNK_SIZE")
        if overlap < 0 or overlap >= chunk_size:
            raise ConfigurationError(
                "Chunk overlap must be between 0 and chunk size - 1", "CHUNK_OVERLAP"
            )

    def is_valid(self, text: str) -> bool:
        """Check a candidate against the configured length bounds."""
        return is_valid(text, self.min_length, self.max_length)

    def split(
        self,
        text: str,
        chunk_size: Optional[int] = None,
        overlap: Optional[int] = None,
        mode: Union[ChunkingMode, str] = ChunkingMode.WORDS,
        source: Optional[str] = None,
    ) -> List[Chunk]:
        """Split text into chunks according to the chunking mode.

        Args:
            text: Raw document text
            chunk_size: Words per window (ignored in lines mode)
            overlap: Words shared by consecutive windows
            mode: One of words, lines, code, markdown; unknown values fall back to words
            source: Attribution stored on every produced chunk

        Returns:
            Valid chunks numbered from 0 in document order
        """
        chunk_size = self.chunk_size if chunk_size is None else chunk_size
        overlap = self.overlap if overlap is None else overlap
        self._check_window(chunk_size, overlap)
        resolved_mode = self._resolve_mode(mode)

        if resolved_mode is ChunkingMode.LINES:
            candidates = self._split_lines(text)
        elif resolved_mode is ChunkingMode.CODE:
            candidates = self._split_code(text, chunk_size, overlap)
        elif resolved_mode is ChunkingMode.MARKDOWN:
            candidates = self._split_markdown(text, chunk_size, overlap)
        else:
            candidates = sliding_window(text.split(), chunk_size, overlap)

        chunks = [
            Chunk(id=index, text=candidate, fingerprint=fingerprint(candidate), source=source)
            for index, candidate in enumerate(c for c in candidates if self.is_valid(c))
        ]

        self.logger.info(
            "Text split into chunks",
            source=source,
            mode=resolved_mode.value,
            candidates=len(candidates),
            chunk_count=len(chunks),
            chunk_size=chunk_size,
            overlap=overlap,
        )
        return chunks

    def deduplicate(self, chunks: Iterable[Chunk], existing_fingerprints: Set[str]) -> List[Chunk]:
        """Drop chunks whose fingerprint is already known, keeping order."""
        chunks = list(chunks)
        unique = [chunk for chunk in chunks if chunk.fingerprint not in existing_fingerprints]
        self.logger.info(
            "Deduplication completed",
            original_count=len(chunks),
            unique_count=len(unique),
        )
        return unique

    def _resolve_mode(self, mode: Union[ChunkingMode, str]) -> ChunkingMode:
        try:
            return ChunkingMode(mode)
        except ValueError:
            self.logger.debug("Unknown chunking mode, using words", mode=str(mode))
            return ChunkingMode.WORDS

    @staticmethod
    def _split_lines(text: str) -> List[str]:
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _split_code(self, text: str, chunk_size: int, overlap: int) -> List[str]:
        candidates: List[str] = []
        for block in _BLANK_LINES.split(text):
            block = block.strip()
            if not block:
                continue
            if estimate_tokens(block) <= 2 * chunk_size:
                candidates.append(block)
            else:
                candidates.extend(sliding_window(block.split(), chunk_size, overlap))
        return candidates

    def _split_markdown(self, text: str, chunk_size: int, overlap: int) -> List[str]:
        candidates: List[str] = []
        for header, body in self._markdown_sections(text):
            section = "\n".join(header + body).strip()
            if not section:
                continue
            if estimate_tokens(section) <= 2 * chunk_size:
                candidates.append(section)
                continue
            # Oversized sections are windowed, every piece keeps its headings
            prefix = "\n".join(header)
            for piece in sliding_window("\n".join(body).split(), chunk_size, overlap):
                candidates.append(f"{prefix}\n{piece}" if prefix else piece)
        return candidates

    @staticmethod
    def _markdown_sections(text: str) -> List[Tuple[List[str], List[str]]]:
        """Group lines into (heading lines, body lines) at level-2/3 headings."""
        sections: List[Tuple[List[str], List[str]]] = []
        header: List[str] = []
        body: List[str] = []
        current_h2: Optional[str] = None
        in_fence = False

        for line in text.splitlines():
            if line.lstrip().startswith(_FENCE):
                in_fence = not in_fence
            match = None if in_fence else _SECTION_HEADING.match(line)
            if match is None:
                body.append(line)
                continue

            sections.append((header, body))
            heading = line.strip()
            if len(match.group(1)) == 2:
                current_h2 = heading
                header = [heading]
            else:
                header = [current_h2, heading] if current_h2 else [heading]
            body = []

        sections.append((header, body))
        return sections
