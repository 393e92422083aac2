"""
Vector index storage.

- EmbeddingStore: in-memory ordered records with exhaustive cosine search
- IndexRepository: one JSON snapshot per source, written atomically

Vectors are kept as float32 values, which survive the JSON round trip
bit for bit.
"""

from .core import EmbeddingStore
from .persistence import IndexRepository, index_name_for, same_source

__all__ = ["EmbeddingStore", "IndexRepository", "index_name_for", "same_source"]
