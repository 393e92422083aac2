"""Configuration settings for MCP Grounding."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General Configuration
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_DIRECTORY: Path = Field(default=Path("./logs"), description="Log file directory")

    # Index Storage Configuration
    INDEX_DIRECTORY: Path = Field(
        default=Path("./data/indexes"), description="Directory holding one persisted index per source"
    )

    # Sources
    RAG_SOURCE_PATHS: List[str] = Field(
        default_factory=list, description="Files or directories ingested at startup"
    )
    RAG_EXCLUDE_PATTERNS: List[str] = Field(
        default_factory=list, description="Glob patterns excluded when walking directories"
    )

    # Chunking Configuration
    CHUNK_SIZE: int = Field(default=100, ge=1, description="Words per chunk")
    CHUNK_OVERLAP: int = Field(default=50, ge=0, description="Words shared by consecutive chunks")
    MIN_CHUNK_LENGTH: int = Field(
        default=10, ge=1, description="Minimum normalized length of a valid chunk"
    )
    MAX_CHUNK_LENGTH: int = Field(
        default=10000, ge=1, description="Maximum normalized length of a valid chunk"
    )

    # Embedding Configuration
    EMBEDDING_PROVIDER: str = Field(
        default="ollama", description="Embedding provider: 'ollama', 'api' or 'local'"
    )
    EMBEDDING_MODEL: str = Field(
        default="nomic-embed-text", description="Embedding model name"
    )
    EMBEDDING_API_BASE: Optional[str] = Field(
        default="http://localhost:11434", description="Embedding API base URL"
    )
    EMBEDDING_API_KEY: Optional[str] = Field(
        default=None, description="Embedding API key"
    )
    EMBEDDING_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, description="Timeout of a single embedding request"
    )
    EMBEDDING_VERIFY_ON_STARTUP: bool = Field(
        default=True, description="Send a probe embedding request when the provider starts"
    )
    EMBEDDING_MAX_ATTEMPTS: int = Field(
        default=3, ge=1, description="Attempts per chunk before it is skipped"
    )
    EMBEDDING_RETRY_BASE_DELAY: float = Field(
        default=0.2, ge=0, description="Base delay in seconds of the exponential backoff"
    )
    EMBEDDING_REQUEST_DELAY: float = Field(
        default=0.1, ge=0, description="Pause in seconds after each successful embedding"
    )

    # Retrieval Configuration
    MAX_RAG_RESULTS: int = Field(
        default=5, ge=1, description="Default number of passages returned by a query"
    )
    RAG_SIMILARITY_THRESHOLD: float = Field(
        default=0.7, ge=-1.0, le=1.0, description="Default minimum cosine similarity"
    )

    # MCP Protocol Configuration
    MCP_SERVER_NAME: str = Field(
        default="grounding", description="MCP server name"
    )

    @model_validator(mode="after")
    def check_chunk_window(self) -> "Settings":
        """Reject windows that would never advance."""
        if self.CHUNK_OVERLAP >= self.CHUNK_SIZE:
            raise ValueError("CHUNK_OVERLAP must be smaller than CHUNK_SIZE")
        if self.MIN_CHUNK_LENGTH > self.MAX_CHUNK_LENGTH:
            raise ValueError("MIN_CHUNK_LENGTH must not exceed MAX_CHUNK_LENGTH")
        return self

    def create_directories(self) -> None:
        """Create necessary directories."""
        self.INDEX_DIRECTORY.mkdir(parents=True, exist_ok=True)
        self.LOG_DIRECTORY.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump()

    def __repr__(self) -> str:
        """String representation of settings."""
        return (
            f"Settings(provider={self.EMBEDDING_PROVIDER}, model={self.EMBEDDING_MODEL}, "
            f"index_dir={self.INDEX_DIRECTORY})"
        )
