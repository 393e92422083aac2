"""Retrieval-augmented grounding: chunking, embeddings, indexes and search."""

from .chunking import Chunker
from .embeddings import EmbeddingManager
from .extractors import SourceExtractor
from .ingestion import IngestionCoordinator
from .retrieval import Retriever
from .store import EmbeddingStore, IndexRepository, index_name_for

__all__ = [
    "Chunker",
    "EmbeddingManager",
    "EmbeddingStore",
    "IndexRepository",
    "IngestionCoordinator",
    "Retriever",
    "SourceExtractor",
    "index_name_for",
]
