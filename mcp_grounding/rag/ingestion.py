"""Ingestion of sources into per-source embedding stores."""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import EmbeddingError, IngestionError
from ..models.rag import Chunk, ExtractedDocument, IngestionReport
from ..utils.async_utils import retry_with_backoff
from .chunking import Chunker
from .embeddings import EmbeddingManager
from .extractors import SourceExtractor
from .extractors.source import relative_source
from .store import EmbeddingStore, IndexRepository, index_name_for


class IngestionCoordinator(LoggerMixin):
    """Extracts, chunks, embeds and persists sources one chunk at a time.

    Every successfully embedded chunk is appended and saved before the next
    one is processed, so an interrupted run keeps its progress and a rerun
    only embeds what is missing.
    """

    def __init__(
        self,
        settings: Settings,
        chunker: Chunker,
        embedding_manager: EmbeddingManager,
        extractor: SourceExtractor,
        repository: IndexRepository,
    ):
        self.settings = settings
        self.chunker = chunker
        self.embedding_manager = embedding_manager
        self.extractor = extractor
        self.repository = repository
        self._stop_event = asyncio.Event()

    def request_stop(self) -> None:
        """Ask running ingestions to stop after the current chunk."""
        self.logger.info("Ingestion stop requested")
        self._stop_event.set()

    def reset_stop(self) -> None:
        """Clear a previous stop request."""
        self._stop_event.clear()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    async def ingest_sources(
        self,
        source_paths: List[str],
        exclude_patterns: Optional[List[str]] = None,
        stores: Optional[Dict[str, EmbeddingStore]] = None,
    ) -> List[IngestionReport]:
        """Ingest several sources sequentially.

        A failing source is logged and reported; the remaining sources are
        still ingested. Each store is registered in ``stores`` as soon as it
        is opened, so it is queryable while it is being filled.
        """
        stores = stores if stores is not None else {}
        reports = []

        for source_path in source_paths:
            if self.stop_requested:
                self.logger.info("Skipping source, ingestion stopped", source_path=source_path)
                reports.append(IngestionReport(
                    source_path=source_path,
                    index_name=index_name_for(source_path),
                    cancelled=True,
                ))
                continue

            try:
                store = await self.open_store(source_path, stores)
                stores[store.index_name] = store
                report = await self.ingest_source(source_path, exclude_patterns, store=store)
            except Exception as e:
                self.logger.error("Source ingestion failed", source_path=source_path, error=str(e))
                report = IngestionReport(
                    source_path=source_path,
                    index_name=index_name_for(source_path),
                    success=False,
                    error=str(e),
                )
            reports.append(report)

        return reports

    async def open_store(
        self,
        source_path: Union[str, Path],
        stores: Optional[Dict[str, EmbeddingStore]] = None,
    ) -> EmbeddingStore:
        """Load the persisted store of a source, checking the source exists.

        Index names already registered in ``stores`` for another source are
        not reused.
        """
        path = Path(source_path)
        if not path.exists():
            raise IngestionError(f"Source path does not exist: {source_path}", str(source_path))
        return await self.repository.load(path, stores)

    async def ingest_source(
        self,
        source_path: Union[str, Path],
        exclude_patterns: Optional[List[str]] = None,
        store: Optional[EmbeddingStore] = None,
    ) -> IngestionReport:
        """Bring the store of one source up to date with its contents.

        Args:
            source_path: File or directory to ingest
            exclude_patterns: Glob patterns skipped while walking a directory
            store: Already opened store for the source; loaded when omitted

        Returns:
            Counts of what was produced, embedded and dropped

        Raises:
            IngestionError: If the source does not exist or cannot be walked
            PersistenceError: If an index write fails
        """
        path = Path(source_path)
        if store is None:
            store = await self.open_store(path)
        elif not path.exists():
            raise IngestionError(f"Source path does not exist: {source_path}", str(source_path))

        report = IngestionReport(source_path=str(source_path), index_name=store.index_name)
        known: Set[str] = set(store.fingerprints)

        self.logger.info(
            "Ingesting source",
            source_path=str(path),
            index_name=store.index_name,
            existing_chunks=len(store),
        )

        if path.is_dir():
            try:
                files = await self.extractor.list_files(path, exclude_patterns)
            except OSError as e:
                raise IngestionError(f"Cannot walk source directory: {e}", str(source_path)) from e

            for file_path in files:
                if self.stop_requested:
                    break
                document = await self.extractor.extract_file(
                    file_path, source=relative_source(path, file_path)
                )
                if document is not None:
                    await self._ingest_document(document, store, known, report)
        else:
            document = await self.extractor.extract_file(path)
            if document is not None:
                await self._ingest_document(document, store, known, report)

        report.cancelled = self.stop_requested
        report.total_chunks = len(store)
        await self.repository.save(store)

        self.logger.info(
            "Source ingested",
            source_path=str(path),
            index_name=store.index_name,
            documents=report.documents,
            chunks_embedded=report.chunks_embedded,
            chunks_failed=report.chunks_failed,
            total_chunks=report.total_chunks,
            cancelled=report.cancelled,
        )
        return report

    async def _ingest_document(
        self,
        document: ExtractedDocument,
        store: EmbeddingStore,
        known: Set[str],
        report: IngestionReport,
    ) -> None:
        report.documents += 1
        chunks = self.chunker.split(document.text, mode=document.mode, source=document.source)
        report.chunks_produced += len(chunks)

        for chunk in self.chunker.deduplicate(chunks, known):
            if self.stop_requested:
                self.logger.info("Ingestion stopped", source=document.source)
                return
            # identical chunks within the same run
            if chunk.fingerprint in known:
                continue
            report.chunks_new += 1

            vector = await self._embed_chunk(chunk)
            if vector is None:
                report.chunks_failed += 1
                continue

            store.append(chunk, vector)
            known.add(chunk.fingerprint)
            report.chunks_embedded += 1
            await self.repository.save(store)

            if self.settings.EMBEDDING_REQUEST_DELAY > 0:
                await asyncio.sleep(self.settings.EMBEDDING_REQUEST_DELAY)

    async def _embed_chunk(self, chunk: Chunk) -> Optional[List[float]]:
        """Embed a chunk with retries; None once every attempt has failed."""

        def log_retry(attempt: int, error: Exception, delay: float) -> None:
            self.logger.warning(
                "Embedding attempt failed, retrying",
                chunk_id=chunk.id,
                source=chunk.source,
                attempt=attempt,
                delay=delay,
                error=str(error),
            )

        try:
            return await retry_with_backoff(
                lambda: self.embedding_manager.embed_text(chunk.text),
                max_attempts=self.settings.EMBEDDING_MAX_ATTEMPTS,
                base_delay=self.settings.EMBEDDING_RETRY_BASE_DELAY,
                retry_on=(EmbeddingError,),
                on_retry=log_retry,
            )
        except EmbeddingError as e:
            self.logger.error(
                "Skipping chunk after failed embedding attempts",
                chunk_id=chunk.id,
                source=chunk.source,
                attempts=self.settings.EMBEDDING_MAX_ATTEMPTS,
                error=str(e),
            )
            return None
