"""Retrieval MCP tools."""

from typing import Annotated, List, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from ..config.logging import LoggerMixin
from ..core.exceptions import GroundingError
from ..core.service import RetrievalService


class RAGTools(LoggerMixin):
    """Retrieval tools exposed to the conversational layer."""

    def __init__(self, mcp: FastMCP, service: RetrievalService):
        self.mcp = mcp
        self.service = service
        self._register_tools()

    async def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        min_score: Optional[float] = None,
        source: Optional[str] = None,
    ) -> str:
        """Relevant passages for a query, or "" when nothing relevant is found."""
        try:
            context = await self.service.get_relevant_context(
                query, top_k=top_k, min_score=min_score, source=source
            )
        except GroundingError as e:
            self.logger.warning("Search tool failed", query=query[:100], error=str(e))
            return ""

        self.logger.info("Search performed", query=query[:100], context_length=len(context))
        return context

    async def ingest(self, paths: List[str], exclude: Optional[List[str]] = None) -> List[dict]:
        """Ingest sources and report per-source outcomes."""
        reports = await self.service.ingest(paths, exclude)
        self.logger.info("Sources ingested via MCP", sources=len(reports))
        return [report.model_dump() for report in reports]

    def stats(self) -> List[dict]:
        """Statistics of every loaded index."""
        return [stats.model_dump(mode="json") for stats in self.service.get_stats()]

    def _register_tools(self) -> None:
        """Register retrieval tools with FastMCP server."""

        @self.mcp.tool()
        async def rag_search(
            query: Annotated[str, Field(description="Question or topic to find relevant documentation for")],
            top_k: Annotated[Optional[int], Field(
                description="Maximum number of passages to return (server default if omitted)",
                ge=1, le=100
            )] = None,
            min_score: Annotated[Optional[float], Field(
                description="Minimum cosine similarity (-1.0 to 1.0, server default if omitted)",
                ge=-1.0, le=1.0
            )] = None,
            source: Annotated[Optional[str], Field(
                description="Only search the index built from this source path"
            )] = None,
        ) -> str:
            """Search the ingested knowledge base for passages relevant to a query.

            Returns:
                The most relevant passages separated by "---" lines, or an
                empty string when nothing relevant was found
            """
            return await self.search(query, top_k=top_k, min_score=min_score, source=source)

        @self.mcp.tool()
        async def rag_ingest(
            paths: Annotated[List[str], Field(description="Files or directories to ingest")],
            exclude: Annotated[Optional[List[str]], Field(
                description="Glob patterns to skip while walking directories, e.g. '**/*.log'"
            )] = None,
        ) -> List[dict]:
            """Ingest files or directories into their indexes.

            Returns:
                One report per source with chunk counts and errors

            Note:
                Already indexed chunks are not embedded again, so repeating
                an ingestion only processes new content.
            """
            return await self.ingest(paths, exclude)

        @self.mcp.tool()
        async def rag_stats() -> List[dict]:
            """Get statistics about the loaded indexes.

            Returns:
                One entry per index with its chunk count, embedding
                dimension and storage path
            """
            return self.stats()
