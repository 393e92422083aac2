"""MCP server exposing the retrieval service over stdio."""

import asyncio
from typing import Optional

from mcp.server.fastmcp import FastMCP

from ..config.logging import LoggerMixin, setup_logging
from ..config.settings import Settings
from ..core.service import RetrievalService
from ..models.rag import InitializationReport
from .rag_tools import RAGTools


class GroundingMCPServer(LoggerMixin):
    """FastMCP server backed by a RetrievalService."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        service: Optional[RetrievalService] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.settings.create_directories()

        setup_logging(self.settings)
        self.logger.info("Initializing MCP Grounding server", name=self.settings.MCP_SERVER_NAME)

        self.service = service or RetrievalService(self.settings)
        self.mcp = FastMCP(self.settings.MCP_SERVER_NAME)
        self.rag_tools = RAGTools(self.mcp, self.service)
        self._init_task: Optional[asyncio.Task] = None

    async def _initialize_service(self) -> InitializationReport:
        report = await self.service.initialize()
        if not report.success:
            self.logger.error("Retrieval service unavailable", error=report.error)
        elif report.failed_sources:
            self.logger.warning("Some sources failed to ingest", sources=report.failed_sources)
        return report

    async def run(self) -> None:
        """Serve MCP requests on stdio until the client disconnects.

        Sources are ingested in the background; searches are answered from
        whatever has been indexed so far.
        """
        self._init_task = asyncio.create_task(self._initialize_service())
        try:
            await self.mcp.run_stdio_async()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Stop ingestion and release resources."""
        self.logger.info("Shutting down MCP Grounding server")
        self.service.stop_ingestion()

        if self._init_task and not self._init_task.done():
            self._init_task.cancel()
            try:
                await self._init_task
            except asyncio.CancelledError:
                pass

        await self.service.close()
        self.logger.info("Server shutdown complete")
