"""Retrieval engine domain models for MCP Grounding."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator

from .base import GroundingBaseModel, StatsModel, TimestampedModel


class ChunkingMode(str, Enum):
    """How a document's text is split into chunks."""

    WORDS = "words"
    LINES = "lines"
    CODE = "code"
    MARKDOWN = "markdown"


class ExtractedDocument(GroundingBaseModel):
    """Text extracted from one source file, ready to be chunked."""

    text: str = Field(description="Raw extracted text")
    mode: ChunkingMode = Field(default=ChunkingMode.WORDS, description="Chunking mode")
    source: str = Field(description="Display name of the file the text came from")

    @property
    def word_count(self) -> int:
        """Estimate word count in the text."""
        return len(self.text.split())


class Chunk(GroundingBaseModel):
    """A candidate retrievable unit of text."""

    id: int = Field(ge=0, description="Sequence id within one split or one index")
    text: str = Field(description="Chunk text as shown to users")
    fingerprint: str = Field(description="SHA-256 hex digest of the normalized text")
    source: Optional[str] = Field(
        default=None,
        description="Document the chunk was produced from"
    )


class IndexedVector(Chunk):
    """A chunk together with its embedding vector."""

    embedding: List[float] = Field(description="Embedding vector (float32 values)")

    @property
    def dimension(self) -> int:
        """Length of the embedding vector."""
        return len(self.embedding)


class IndexSnapshot(TimestampedModel):
    """Persisted form of one index."""

    source_path: Optional[str] = Field(default=None, description="Source the index was built from")
    index_name: str = Field(description="Stable name derived from the source path")
    dtype: str = Field(default="float32", description="Numeric type of persisted vectors")
    dimension: Optional[int] = Field(default=None, ge=1, description="Embedding dimension")
    chunks: List[IndexedVector] = Field(default_factory=list, description="Ordered records")

    @field_validator('dtype')
    @classmethod
    def dtype_supported(cls, v: str) -> str:
        if v != "float32":
            raise ValueError(f'Unsupported vector dtype: {v}')
        return v


class SearchHit(GroundingBaseModel):
    """A ranked passage returned by a similarity query."""

    text: str = Field(description="Passage text")
    score: float = Field(ge=-1.0, le=1.0, description="Cosine similarity to the query")
    rank: int = Field(ge=1, description="Result ranking (1-based)")
    fingerprint: Optional[str] = Field(default=None, description="Fingerprint of the chunk")
    source: Optional[str] = Field(default=None, description="Document the passage came from")
    index_name: Optional[str] = Field(default=None, description="Index that produced the hit")


class IngestionReport(GroundingBaseModel):
    """Outcome of one ingestion run over a single source."""

    source_path: str = Field(description="Ingested file or directory")
    index_name: Optional[str] = Field(default=None, description="Index the source was ingested into")
    documents: int = Field(default=0, ge=0, description="Documents extracted from the source")
    chunks_produced: int = Field(default=0, ge=0, description="Valid chunks produced by the chunker")
    chunks_new: int = Field(default=0, ge=0, description="Chunks left after deduplication")
    chunks_embedded: int = Field(default=0, ge=0, description="Chunks embedded and appended")
    chunks_failed: int = Field(default=0, ge=0, description="Chunks dropped after exhausting retries")
    total_chunks: int = Field(default=0, ge=0, description="Index size at the end of the run")
    cancelled: bool = Field(default=False, description="Whether the run was stopped early")
    success: bool = Field(default=True, description="Whether the run completed without error")
    error: Optional[str] = Field(default=None, description="Error message if the run failed")


class InitializationReport(GroundingBaseModel):
    """Outcome of RetrievalService.initialize()."""

    success: bool = Field(description="Whether the service is ready to answer queries")
    error: Optional[str] = Field(default=None, description="Why initialization failed")
    reports: List[IngestionReport] = Field(default_factory=list, description="Per-source outcomes")

    @property
    def failed_sources(self) -> List[str]:
        """Sources whose ingestion failed."""
        return [report.source_path for report in self.reports if not report.success]


class IndexStats(StatsModel):
    """Statistics about one loaded index."""

    index_name: str = Field(description="Index name")
    source_path: Optional[str] = Field(default=None, description="Source the index was built from")
    total_chunks: int = Field(ge=0, description="Number of stored records")
    dimension: Optional[int] = Field(default=None, ge=1, description="Embedding dimension")
    index_path: Optional[Path] = Field(default=None, description="Persisted index file")
