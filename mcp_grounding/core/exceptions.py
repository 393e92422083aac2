"""Custom exceptions for MCP Grounding."""

from typing import Any, Dict, Optional


class GroundingError(Exception):
    """Base exception for all MCP Grounding errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [self.message]
        if self.error_code:
            parts.append(f"(code: {self.error_code})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(GroundingError):
    """Raised when there's a configuration issue."""

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class ValidationError(GroundingError):
    """Raised when data validation fails."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class RAGError(GroundingError):
    """Raised when there's a retrieval engine issue."""

    def __init__(self, message: str, source_path: Optional[str] = None) -> None:
        details = {"source_path": source_path} if source_path else {}
        super().__init__(message, "RAG_ERROR", details)


class EmbeddingError(RAGError):
    """Raised when there's an embedding generation issue."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.error_code = "EMBEDDING_ERROR"


class ExtractionError(RAGError):
    """Raised when a file cannot be read or decoded."""

    def __init__(self, message: str, file_path: Optional[str] = None) -> None:
        super().__init__(message, file_path)
        self.error_code = "EXTRACTION_ERROR"


class IngestionError(RAGError):
    """Raised when a source cannot be ingested at all."""

    def __init__(self, message: str, source_path: Optional[str] = None) -> None:
        super().__init__(message, source_path)
        self.error_code = "INGESTION_ERROR"


class PersistenceError(RAGError):
    """Raised when an index cannot be written to storage."""

    def __init__(self, message: str, index_path: Optional[str] = None) -> None:
        super().__init__(message)
        self.error_code = "PERSISTENCE_ERROR"
        if index_path:
            self.details["index_path"] = index_path


class IndexCorruptedError(RAGError):
    """Raised when a persisted index cannot be parsed."""

    def __init__(self, index_path: str, reason: str) -> None:
        super().__init__(f"Index is corrupted: {index_path} ({reason})")
        self.error_code = "INDEX_CORRUPTED"
        self.details["index_path"] = index_path


class EmptyIndexError(RAGError):
    """Raised when a populated index is required but none holds any chunk."""

    def __init__(self, message: str = "Index is empty, ingest documents first") -> None:
        super().__init__(message)
        self.error_code = "EMPTY_INDEX"
