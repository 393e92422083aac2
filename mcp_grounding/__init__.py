"""
MCP Grounding - knowledge grounding for conversational agents.

This package provides a retrieval engine with:
- Mode-aware chunking of text, code, markdown, PDF and spreadsheet sources
- Content-addressed deduplication of chunks
- Incremental, crash-resilient index construction with retrying embeddings
- Persisted per-source vector indexes with top-K cosine similarity search
"""

__version__ = "0.1.0"
__author__ = "MCP Grounding Team"
__email__ = "dev@mcp-grounding.dev"

from .config.settings import Settings
from .core.service import RetrievalService

__all__ = ["RetrievalService", "Settings"]
