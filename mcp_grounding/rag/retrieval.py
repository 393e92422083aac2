"""Similarity search across the loaded per-source indexes."""

from typing import List, Mapping, Optional

from ..config.logging import LoggerMixin
from ..core.exceptions import EmptyIndexError, RAGError
from ..models.rag import SearchHit
from .embeddings import EmbeddingManager
from .store import EmbeddingStore, index_name_for, same_source

CONTEXT_SEPARATOR = "\n\n---\n\n"


class Retriever(LoggerMixin):
    """Embeds queries and merges the ranked hits of several stores."""

    def __init__(self, embedding_manager: EmbeddingManager, stores: Mapping[str, EmbeddingStore]):
        self.embedding_manager = embedding_manager
        self.stores = stores

    def select_stores(self, source: Optional[str] = None) -> List[EmbeddingStore]:
        """All loaded stores, or only the one built from ``source``."""
        if source is None:
            return list(self.stores.values())

        store = self.stores.get(source)
        if store is None:
            store = next(
                (s for s in self.stores.values() if s.source_path and same_source(s.source_path, source)),
                None,
            )
        if store is None:
            store = self.stores.get(index_name_for(source))
        if store is None:
            raise RAGError(f"No index loaded for source: {source}", source)
        return [store]

    async def search(
        self,
        query: str,
        top_k: int,
        min_score: float,
        source: Optional[str] = None,
        require_populated: bool = False,
    ) -> List[SearchHit]:
        """Search the selected stores and merge their hits by score.

        Raises:
            EmptyIndexError: If ``require_populated`` is set and nothing is indexed
            RAGError: If the query cannot be embedded or searched
        """
        stores = [store for store in self.select_stores(source) if len(store) > 0]
        if not stores:
            if require_populated:
                raise EmptyIndexError()
            self.logger.debug("No populated index to search", source=source)
            return []

        try:
            query_vector = await self.embedding_manager.embed_text(query)
        except RAGError:
            raise
        except Exception as e:
            raise RAGError(f"Failed to embed query: {e}")

        hits: List[SearchHit] = []
        for store in stores:
            hits.extend(store.search(query_vector, top_k=top_k, min_score=min_score))

        # stable sort keeps store order for equal scores
        hits.sort(key=lambda hit: hit.score, reverse=True)
        merged = [
            hit.model_copy(update={"rank": rank})
            for rank, hit in enumerate(hits[:top_k], start=1)
        ]

        self.logger.info(
            "Search completed",
            query=query[:100] + "..." if len(query) > 100 else query,
            indexes_searched=len(stores),
            results_count=len(merged),
            top_k=top_k,
            min_score=min_score,
        )
        return merged

    @staticmethod
    def join_context(hits: List[SearchHit]) -> str:
        """Combine hit texts into one context block."""
        return CONTEXT_SEPARATOR.join(hit.text for hit in hits)
