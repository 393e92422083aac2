"""Test utilities and helper functions for MCP Grounding tests."""

import hashlib
import re
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

from mcp_grounding.core.exceptions import EmbeddingError
from mcp_grounding.models.rag import Chunk
from mcp_grounding.rag.chunking import fingerprint

FAKE_DIMENSION = 256


def bag_of_words_vector(text: str, dimension: int = FAKE_DIMENSION) -> List[float]:
    """Hash every word into a bucket so texts sharing words are similar."""
    vector = [0.0] * dimension
    for word in re.findall(r"\w+", text.lower()):
        bucket = int(hashlib.sha256(word.encode("utf-8")).hexdigest()[:8], 16) % dimension
        vector[bucket] += 1.0
    return vector


class FakeEmbeddingManager:
    """Stands in for EmbeddingManager with deterministic vectors."""

    def __init__(self, dimension: int = FAKE_DIMENSION):
        self.dimension = dimension
        self.calls: List[str] = []
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        self._initialized = True

    async def close(self) -> None:
        self._initialized = False

    async def embed_text(self, text: str) -> List[float]:
        if not self._initialized:
            raise EmbeddingError("Embedding manager not initialized")
        if not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        self.calls.append(text)
        return bag_of_words_vector(text, self.dimension)

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        return [await self.embed_text(text) for text in texts]

    def get_embedding_dimension(self) -> int:
        return self.dimension

    def get_model_info(self) -> Dict[str, Any]:
        return {"provider": "fake", "model": "bag-of-words", "dimension": self.dimension}


class FlakyEmbeddingManager(FakeEmbeddingManager):
    """Fails for texts containing a marker, or for the first few calls."""

    def __init__(self, failing_marker: Optional[str] = None, failures_before_success: int = 0):
        super().__init__()
        self.failing_marker = failing_marker
        self.failures_before_success = failures_before_success
        self.attempts: List[str] = []

    async def embed_text(self, text: str) -> List[float]:
        self.attempts.append(text)
        if self.failing_marker and self.failing_marker in text:
            raise EmbeddingError("provider unavailable")
        if self.failures_before_success > 0:
            self.failures_before_success -= 1
            raise EmbeddingError("provider busy")
        return await super().embed_text(text)


def make_chunk(text: str, chunk_id: int = 0, source: Optional[str] = None) -> Chunk:
    """Create a chunk with its real fingerprint."""
    return Chunk(id=chunk_id, text=text, fingerprint=fingerprint(text), source=source)


class MockFactory:
    """Factory for creating various mocks used in tests."""

    @staticmethod
    def create_aiohttp_session_mock(response_data: Any = None, status: int = 200) -> AsyncMock:
        """Create a mock aiohttp session."""
        session_mock = AsyncMock()
        response_mock = AsyncMock()
        response_mock.status = status
        response_mock.text = AsyncMock(return_value="error body")

        if response_data is not None:
            response_mock.json = AsyncMock(return_value=response_data)

        class MockAsyncContextManager:
            def __init__(self, response):
                self.response = response

            async def __aenter__(self):
                return self.response

            async def __aexit__(self, exc_type, exc_val, exc_tb):
                return None

        context_manager = MockAsyncContextManager(response_mock)

        session_mock.post = MagicMock(return_value=context_manager)
        session_mock.close = AsyncMock()
        return session_mock
