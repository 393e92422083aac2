"""In-process embeddings with sentence-transformers."""

import asyncio
from typing import Any, Dict, List, Optional

import numpy as np

try:
    from sentence_transformers import SentenceTransformer
except ImportError:
    SentenceTransformer = None

from ...core.exceptions import EmbeddingError
from .base import EmbeddingProvider

VERIFY_TEXT = "Embedding provider start-up check."


class LocalEmbeddingProvider(EmbeddingProvider):
    """Runs a sentence-transformers model in the default executor.

    Vectors come back as float32 values, the precision the index stores,
    so a chunk embedded locally persists without any rounding.
    """

    def __init__(self, settings):
        super().__init__(settings)
        self.model: Optional[SentenceTransformer] = None

    @property
    def provider_name(self) -> str:
        return "local"

    async def initialize(self) -> None:
        if SentenceTransformer is None:
            raise EmbeddingError(
                "sentence-transformers not available. Install with: pip install 'mcp-grounding[local]'"
            )

        loop = asyncio.get_event_loop()
        try:
            self.model = await loop.run_in_executor(
                None, SentenceTransformer, self.settings.EMBEDDING_MODEL
            )
        except Exception as e:
            self.logger.error(
                "Failed to load local embedding model", model=self.settings.EMBEDDING_MODEL, error=str(e)
            )
            raise EmbeddingError(f"Local embedding model could not be loaded: {e}")

        self._observed_dimension = self.model.get_sentence_embedding_dimension()
        self._initialized = True

        if self.settings.EMBEDDING_VERIFY_ON_STARTUP:
            # the model may not report a dimension; a real encode settles it
            self._remember_dimension(await self.embed_texts([VERIFY_TEXT]))

        self.logger.info(
            "Local embedding provider initialized",
            model=self.settings.EMBEDDING_MODEL,
            dimension=self._observed_dimension,
        )

    async def close(self) -> None:
        self.model = None
        self._initialized = False
        self.logger.info("Local embedding provider closed")

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of chunk texts.

        Raises:
            EmbeddingError: On empty input text, an encoding failure, or a
                vector that is not finite or changes dimension
        """
        self._ensure_initialized()

        if not texts:
            return []
        if any(not text.strip() for text in texts):
            raise EmbeddingError("Cannot embed empty text")

        loop = asyncio.get_event_loop()
        try:
            matrix = await loop.run_in_executor(None, self._encode, texts)
        except Exception as e:
            self.logger.error("Local encoding failed", count=len(texts), error=str(e))
            raise EmbeddingError(f"Local encoding failed: {e}")

        if matrix.ndim != 2 or matrix.shape[0] != len(texts):
            raise EmbeddingError(f"Model returned {matrix.shape} for {len(texts)} texts")
        if not np.isfinite(matrix).all():
            raise EmbeddingError("Model returned a non-finite embedding")
        if self._observed_dimension and matrix.shape[1] != self._observed_dimension:
            raise EmbeddingError(
                f"Model returned dimension {matrix.shape[1]}, expected {self._observed_dimension}"
            )

        self.logger.debug("Texts embedded locally", count=len(texts), dimension=matrix.shape[1])
        return matrix.tolist()

    def _encode(self, texts: List[str]) -> np.ndarray:
        vectors = self.model.encode(texts, convert_to_numpy=True, show_progress_bar=False)
        return np.asarray(vectors, dtype=np.float32)

    def get_model_info(self) -> Dict[str, Any]:
        info = super().get_model_info()
        if self.model is not None:
            info["max_sequence_length"] = getattr(self.model, "max_seq_length", None)
            info["device"] = str(getattr(self.model, "device", "cpu"))
        return info
