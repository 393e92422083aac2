"""MCP Grounding domain models."""

from .base import GroundingBaseModel, StatsModel, TimestampedModel
from .rag import (
    Chunk,
    ChunkingMode,
    ExtractedDocument,
    IndexedVector,
    IndexSnapshot,
    IndexStats,
    IngestionReport,
    InitializationReport,
    SearchHit,
)

__all__ = [
    # Base models
    "GroundingBaseModel",
    "TimestampedModel",
    "StatsModel",

    # RAG models
    "Chunk",
    "ChunkingMode",
    "ExtractedDocument",
    "IndexedVector",
    "IndexSnapshot",
    "IndexStats",
    "IngestionReport",
    "InitializationReport",
    "SearchHit",
]
