"""Abstract base classes for embedding providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import EmbeddingError

# Common dimensions for popular embedding models
KNOWN_MODEL_DIMENSIONS = {
    "nomic-embed-text": 768,
    "mxbai-embed-large": 1024,
    "all-minilm": 384,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
    "all-MiniLM-L6-v2": 384,
    "all-mpnet-base-v2": 768,
}


class EmbeddingProvider(ABC, LoggerMixin):
    """Abstract base class for embedding providers."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._initialized = False
        self._observed_dimension: Optional[int] = None

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the embedding provider."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the embedding provider and clean up resources."""
        pass

    @abstractmethod
    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple texts."""
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the name of this provider."""
        pass

    def _ensure_initialized(self) -> None:
        """Ensure the provider is initialized."""
        if not self._initialized:
            raise EmbeddingError(f"{self.provider_name} provider not initialized")

    async def embed_text(self, text: str) -> List[float]:
        """Generate embedding for a single text."""
        if not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        embeddings = await self.embed_texts([text])
        if not embeddings or not embeddings[0]:
            raise EmbeddingError("Provider returned an empty embedding")
        return embeddings[0]

    def _remember_dimension(self, embeddings: List[List[float]]) -> None:
        if embeddings and embeddings[0]:
            self._observed_dimension = len(embeddings[0])

    def get_embedding_dimension(self) -> int:
        """Get the dimension of embeddings produced by this provider."""
        self._ensure_initialized()
        if self._observed_dimension:
            return self._observed_dimension
        return KNOWN_MODEL_DIMENSIONS.get(self.settings.EMBEDDING_MODEL, 768)

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the embedding model."""
        self._ensure_initialized()

        return {
            "model_name": self.settings.EMBEDDING_MODEL,
            "provider": self.provider_name,
            "dimension": self.get_embedding_dimension(),
        }
