"""Retrieval service facade used by the MCP tools and the CLI."""

import asyncio
from typing import Dict, List, Optional

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..models.rag import IndexStats, IngestionReport, InitializationReport, SearchHit
from ..rag.chunking import Chunker
from ..rag.embeddings import EmbeddingManager
from ..rag.extractors import SourceExtractor
from ..rag.ingestion import IngestionCoordinator
from ..rag.retrieval import Retriever
from ..rag.store import EmbeddingStore, IndexRepository, index_name_for
from ..utils.validation import validate_query_args, validate_source_paths
from .exceptions import EmptyIndexError, GroundingError, ValidationError


class RetrievalService(LoggerMixin):
    """Owns the loaded indexes and answers similarity queries over them."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        embedding_manager: Optional[EmbeddingManager] = None,
        repository: Optional[IndexRepository] = None,
        chunker: Optional[Chunker] = None,
        extractor: Optional[SourceExtractor] = None,
    ):
        self.settings = settings or Settings()
        self.embedding_manager = embedding_manager or EmbeddingManager(self.settings)
        self.repository = repository or IndexRepository.from_settings(self.settings)
        self.stores: Dict[str, EmbeddingStore] = {}
        self.coordinator = IngestionCoordinator(
            self.settings,
            chunker or Chunker.from_settings(self.settings),
            self.embedding_manager,
            extractor or SourceExtractor(),
            self.repository,
        )
        self.retriever = Retriever(self.embedding_manager, self.stores)
        self._locks: Dict[str, asyncio.Lock] = {}
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(
        self,
        source_paths: Optional[List[str]] = None,
        exclude_patterns: Optional[List[str]] = None,
        ingest: bool = True,
    ) -> InitializationReport:
        """Start the embedding provider and bring every source's index up to date.

        Sources default to ``RAG_SOURCE_PATHS`` and exclusions to
        ``RAG_EXCLUDE_PATTERNS``. An invalid source list and failing sources
        are reported, never raised. With ``ingest=False`` persisted indexes
        are only loaded.
        """
        source_paths = self.settings.RAG_SOURCE_PATHS if source_paths is None else source_paths
        if exclude_patterns is None:
            exclude_patterns = self.settings.RAG_EXCLUDE_PATTERNS

        self.settings.create_directories()

        try:
            if not self.embedding_manager.is_initialized:
                await self.embedding_manager.initialize()
        except GroundingError as e:
            self.logger.error("Retrieval service initialization failed", error=str(e))
            return InitializationReport(success=False, error=str(e))

        self._initialized = True

        try:
            if ingest:
                reports = await self.ingest(source_paths, exclude_patterns)
            else:
                reports = await self.load_indexes(source_paths)
        except ValidationError as e:
            self.logger.error("Invalid source paths", source_paths=source_paths, error=str(e))
            return InitializationReport(success=False, error=str(e))

        report = InitializationReport(success=True, reports=reports)
        self.logger.info(
            "Retrieval service initialized",
            sources=len(source_paths),
            failed_sources=report.failed_sources,
            indexes=len(self.stores),
            total_chunks=sum(len(store) for store in self.stores.values()),
        )
        return report

    async def load_indexes(self, source_paths: List[str]) -> List[IngestionReport]:
        """Load the persisted index of each source without ingesting anything."""
        reports = []
        for source_path in validate_source_paths(source_paths):
            store = await self.repository.load(source_path, self.stores)
            self.stores[store.index_name] = store
            reports.append(IngestionReport(
                source_path=source_path,
                index_name=store.index_name,
                total_chunks=len(store),
            ))
        return reports

    async def ingest(
        self,
        source_paths: List[str],
        exclude_patterns: Optional[List[str]] = None,
    ) -> List[IngestionReport]:
        """Ingest sources on demand, one after the other.

        Runs over the same index are serialized; queries keep being answered
        from whatever has been appended so far. A stop requested before the
        call does not carry over to it.
        """
        source_paths = validate_source_paths(source_paths)
        self.coordinator.reset_stop()
        if exclude_patterns is None:
            exclude_patterns = self.settings.RAG_EXCLUDE_PATTERNS

        reports = []
        for source_path in source_paths:
            async with self._lock_for(index_name_for(source_path)):
                reports.extend(await self.coordinator.ingest_sources(
                    [source_path], exclude_patterns, self.stores
                ))
        return reports

    async def query(
        self,
        text: str,
        top_k: Optional[int] = None,
        min_score: Optional[float] = None,
        source: Optional[str] = None,
        require_populated: bool = False,
    ) -> List[SearchHit]:
        """Return the passages most similar to ``text``.

        Args:
            text: Query text
            top_k: Maximum number of passages (default ``MAX_RAG_RESULTS``)
            min_score: Minimum cosine similarity (default ``RAG_SIMILARITY_THRESHOLD``)
            source: Restrict the search to the index built from this source
            require_populated: Raise instead of returning nothing when no chunk is indexed

        Returns:
            Hits ranked by descending score; empty when nothing is relevant
            or when the query cannot be served.

        Raises:
            ValidationError: If an argument is out of range
            EmptyIndexError: If ``require_populated`` is set and nothing is indexed
        """
        validate_query_args(text, top_k, min_score)
        top_k = self.settings.MAX_RAG_RESULTS if top_k is None else top_k
        min_score = self.settings.RAG_SIMILARITY_THRESHOLD if min_score is None else min_score

        try:
            return await self.retriever.search(
                text,
                top_k=top_k,
                min_score=min_score,
                source=source,
                require_populated=require_populated,
            )
        except EmptyIndexError:
            raise
        except GroundingError as e:
            self.logger.warning("Query failed, returning no results", source=source, error=str(e))
            return []

    async def get_relevant_context(
        self,
        text: str,
        top_k: Optional[int] = None,
        min_score: Optional[float] = None,
        source: Optional[str] = None,
    ) -> str:
        """Relevant passages joined into one block, or "" when none match."""
        hits = await self.query(text, top_k=top_k, min_score=min_score, source=source)
        if not hits:
            self.logger.debug("No relevant context found", query=text[:100])
            return ""
        return self.retriever.join_context(hits)

    def get_stats(self) -> List[IndexStats]:
        """Statistics of every loaded index."""
        return [
            IndexStats(
                index_name=name,
                source_path=store.source_path,
                total_chunks=len(store),
                dimension=store.dimension,
                index_path=self.repository.index_path(name),
            )
            for name, store in sorted(self.stores.items())
        ]

    def stop_ingestion(self) -> None:
        """Stop running ingestions after their current chunk."""
        self.coordinator.request_stop()

    async def close(self) -> None:
        """Stop ingestion and release the embedding provider."""
        self.stop_ingestion()
        await self.embedding_manager.close()
        self._initialized = False
        self.logger.info("Retrieval service closed")

    def _lock_for(self, index_name: str) -> asyncio.Lock:
        if index_name not in self._locks:
            self._locks[index_name] = asyncio.Lock()
        return self._locks[index_name]
