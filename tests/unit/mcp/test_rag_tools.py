"""Tests for MCP retrieval tools."""

from pathlib import Path
from typing import Any, Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcp_grounding.core.exceptions import ValidationError
from mcp_grounding.core.service import RetrievalService
from mcp_grounding.mcp.rag_tools import RAGTools
from mcp_grounding.models.rag import IndexStats, IngestionReport


class TestRAGTools:
    """Test MCP retrieval tools functionality."""

    @pytest.fixture
    def registered(self) -> Dict[str, Callable[..., Any]]:
        return {}

    @pytest.fixture
    def mock_mcp(self, registered: Dict[str, Callable[..., Any]]):
        """Create a mock FastMCP instance that records registered tools."""
        mcp = MagicMock()

        def tool():
            def decorator(func):
                registered[func.__name__] = func
                return func
            return decorator

        mcp.tool.side_effect = tool
        return mcp

    @pytest.fixture
    def mock_service(self):
        """Create a mock retrieval service."""
        return AsyncMock(spec=RetrievalService)

    @pytest.fixture
    def rag_tools(self, mock_mcp, mock_service) -> RAGTools:
        return RAGTools(mock_mcp, mock_service)

    def test_tools_registered(self, rag_tools: RAGTools, registered):
        assert set(registered) == {"rag_search", "rag_ingest", "rag_stats"}

    @pytest.mark.asyncio
    async def test_search_returns_context(self, rag_tools: RAGTools, mock_service, registered):
        mock_service.get_relevant_context.return_value = "first passage\n\n---\n\nsecond passage"

        result = await registered["rag_search"]("how do I install?", top_k=2)

        assert result == "first passage\n\n---\n\nsecond passage"
        mock_service.get_relevant_context.assert_awaited_once_with(
            "how do I install?", top_k=2, min_score=None, source=None
        )

    @pytest.mark.asyncio
    async def test_search_failure_returns_empty_string(self, rag_tools: RAGTools, mock_service, registered):
        mock_service.get_relevant_context.side_effect = ValidationError("Search query cannot be empty", "query")

        assert await registered["rag_search"]("  ") == ""

    @pytest.mark.asyncio
    async def test_ingest_returns_report_dicts(self, rag_tools: RAGTools, mock_service, registered):
        mock_service.ingest.return_value = [
            IngestionReport(source_path="/docs", index_name="docs", chunks_embedded=3, total_chunks=3)
        ]

        result = await registered["rag_ingest"](["/docs"], exclude=["**/*.log"])

        mock_service.ingest.assert_awaited_once_with(["/docs"], ["**/*.log"])
        assert result[0]["index_name"] == "docs"
        assert result[0]["chunks_embedded"] == 3

    @pytest.mark.asyncio
    async def test_stats_are_json_ready(self, rag_tools: RAGTools, mock_service, registered):
        mock_service.get_stats = MagicMock(return_value=[
            IndexStats(index_name="docs", total_chunks=4, dimension=768, index_path=Path("/idx/docs.index.json"))
        ])

        result = await registered["rag_stats"]()

        assert result[0]["total_chunks"] == 4
        assert result[0]["index_path"] == "/idx/docs.index.json"
        assert isinstance(result[0]["generated_at"], str)
