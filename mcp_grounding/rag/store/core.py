"""In-memory vector index with exhaustive cosine similarity search."""

from typing import FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from ...config.logging import LoggerMixin
from ...core.exceptions import RAGError
from ...models.rag import Chunk, IndexedVector, IndexSnapshot, SearchHit

# Vectors are held and persisted as 32-bit floats
VECTOR_DTYPE = np.float32


class EmbeddingStore(LoggerMixin):
    """Ordered collection of (fingerprint, text, vector) records for one source."""

    def __init__(
        self,
        index_name: str,
        source_path: Optional[str] = None,
        records: Optional[Sequence[IndexedVector]] = None,
    ) -> None:
        self.index_name = index_name
        self.source_path = source_path
        self._records: List[IndexedVector] = []
        self._fingerprints: set = set()
        self._dimension: Optional[int] = None
        self._matrix: Optional[np.ndarray] = None
        self._norms: Optional[np.ndarray] = None

        for record in records or []:
            self._add_record(record)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def dimension(self) -> Optional[int]:
        """Embedding dimension, fixed by the first stored vector."""
        return self._dimension

    @property
    def fingerprints(self) -> FrozenSet[str]:
        """Fingerprints of every stored record."""
        return frozenset(self._fingerprints)

    @property
    def records(self) -> Tuple[IndexedVector, ...]:
        """Stored records in insertion order."""
        return tuple(self._records)

    def append(self, chunk: Chunk, vector: Sequence[float]) -> IndexedVector:
        """Store a chunk with its embedding.

        The caller guarantees the fingerprint is not already stored.
        """
        array = np.asarray(vector, dtype=VECTOR_DTYPE)
        if array.ndim != 1 or array.size == 0:
            raise RAGError("Embedding must be a non-empty one-dimensional vector", self.source_path)

        record = IndexedVector(
            id=len(self._records),
            text=chunk.text,
            fingerprint=chunk.fingerprint,
            source=chunk.source,
            embedding=array.tolist(),
        )
        self._add_record(record)
        self.logger.debug("Chunk added to index", index_name=self.index_name, chunk_id=record.id)
        return record

    def search(
        self,
        query_vector: Sequence[float],
        top_k: int = 5,
        min_score: float = 0.7,
    ) -> List[SearchHit]:
        """Rank stored chunks by cosine similarity to the query vector.

        Scores below ``min_score`` are dropped, the rest are returned in
        non-increasing score order, at most ``top_k`` of them. An empty
        store yields an empty list.
        """
        if not self._records or top_k <= 0:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        if query.ndim != 1 or query.shape[0] != self._dimension:
            raise RAGError(
                f"Query dimension {query.shape} does not match index dimension {self._dimension}",
                self.source_path,
            )

        matrix, norms = self._ensure_matrix()
        denominators = norms * np.linalg.norm(query)
        scores = np.zeros(len(self._records), dtype=np.float64)
        np.divide(matrix @ query, denominators, out=scores, where=denominators != 0)
        scores = np.clip(np.nan_to_num(scores, nan=0.0), -1.0, 1.0)

        hits: List[SearchHit] = []
        for position in np.argsort(-scores, kind="stable"):
            score = float(scores[position])
            if score < min_score or len(hits) >= top_k:
                break
            record = self._records[position]
            hits.append(SearchHit(
                text=record.text,
                score=score,
                rank=len(hits) + 1,
                fingerprint=record.fingerprint,
                source=record.source,
                index_name=self.index_name,
            ))

        self.logger.debug(
            "Index searched",
            index_name=self.index_name,
            scanned=len(self._records),
            results=len(hits),
        )
        return hits

    def serialize(self) -> IndexSnapshot:
        """Capture the full index in its persistable form."""
        return IndexSnapshot(
            source_path=self.source_path,
            index_name=self.index_name,
            dimension=self._dimension,
            chunks=list(self._records),
        )

    @classmethod
    def deserialize(cls, snapshot: IndexSnapshot) -> "EmbeddingStore":
        """Rebuild a store from a snapshot."""
        return cls(
            index_name=snapshot.index_name,
            source_path=snapshot.source_path,
            records=snapshot.chunks,
        )

    def _add_record(self, record: IndexedVector) -> None:
        if self._dimension is None:
            self._dimension = record.dimension
        elif record.dimension != self._dimension:
            raise RAGError(
                f"Embedding dimension mismatch: expected {self._dimension}, got {record.dimension}",
                self.source_path,
            )
        self._records.append(record)
        self._fingerprints.add(record.fingerprint)
        self._matrix = None
        self._norms = None

    def _ensure_matrix(self) -> Tuple[np.ndarray, np.ndarray]:
        if self._matrix is None or self._norms is None:
            self._matrix = np.array([r.embedding for r in self._records], dtype=np.float64)
            self._norms = np.linalg.norm(self._matrix, axis=1)
        return self._matrix, self._norms
