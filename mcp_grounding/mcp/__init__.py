"""MCP protocol surface."""

from .rag_tools import RAGTools
from .server import GroundingMCPServer

__all__ = ["GroundingMCPServer", "RAGTools"]
