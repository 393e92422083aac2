"""
Chunking of extracted documents into retrievable units.

Four modes are supported:

- **words**: sliding window of N words with an overlap
- **lines**: one chunk per non-blank line, for row-oriented tables
- **code**: blank-line separated blocks, kept whole when they fit
- **markdown**: level-2/3 sections carrying their level-2 heading as context

Every chunk is validated and fingerprinted over its normalized text, so
chunks that differ only in formatting share the same identity.
"""

from .chunker import Chunker, sliding_window
from .modes import infer_chunking_mode, is_supported
from .text import fingerprint, is_valid, normalize

__all__ = [
    "Chunker",
    "sliding_window",
    "infer_chunking_mode",
    "is_supported",
    "fingerprint",
    "is_valid",
    "normalize",
]
