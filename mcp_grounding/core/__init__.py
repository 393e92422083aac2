"""Core service and error types for MCP Grounding."""

from .exceptions import GroundingError, ConfigurationError, RAGError
from .service import RetrievalService

__all__ = ["RetrievalService", "GroundingError", "ConfigurationError", "RAGError"]
