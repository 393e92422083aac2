"""File extension to chunking mode mapping."""

from pathlib import Path
from typing import Dict, Optional, Union

from ...models.rag import ChunkingMode

CODE_EXTENSIONS = frozenset({
    ".ts", ".js", ".tsx", ".jsx", ".py", ".java", ".cpp",
    ".c", ".cs", ".go", ".rs", ".php", ".swift", ".kt",
})

PLAIN_TEXT_EXTENSIONS = frozenset({
    ".txt", ".json", ".html", ".css", ".yaml", ".yml", ".xml",
})

EXTENSION_MODES: Dict[str, ChunkingMode] = {
    ".pdf": ChunkingMode.WORDS,
    ".xlsx": ChunkingMode.LINES,
    ".md": ChunkingMode.MARKDOWN,
    **{ext: ChunkingMode.CODE for ext in CODE_EXTENSIONS},
    **{ext: ChunkingMode.WORDS for ext in PLAIN_TEXT_EXTENSIONS},
}


def infer_chunking_mode(path: Union[str, Path]) -> Optional[ChunkingMode]:
    """Return the chunking mode for a file, or None if the format is unsupported."""
    return EXTENSION_MODES.get(Path(path).suffix.lower())


def is_supported(path: Union[str, Path]) -> bool:
    """Check whether a file can be ingested."""
    return infer_chunking_mode(path) is not None
