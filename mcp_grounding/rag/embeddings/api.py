"""HTTP embedding providers: OpenAI-compatible APIs and Ollama."""

from abc import abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp

from ...core.exceptions import EmbeddingError
from .base import EmbeddingProvider


class HttpEmbeddingProvider(EmbeddingProvider):
    """Shared session handling for providers reached over HTTP."""

    def __init__(self, settings):
        super().__init__(settings)
        self._session: Optional[aiohttp.ClientSession] = None

    async def initialize(self) -> None:
        """Open the HTTP session and optionally probe the endpoint."""
        if not self.settings.EMBEDDING_API_BASE:
            raise EmbeddingError(f"EMBEDDING_API_BASE required for {self.provider_name} provider")

        timeout = aiohttp.ClientTimeout(total=self.settings.EMBEDDING_TIMEOUT_SECONDS)
        self._session = aiohttp.ClientSession(timeout=timeout)

        try:
            if self.settings.EMBEDDING_VERIFY_ON_STARTUP:
                await self._test_api_connection()
            self._initialized = True

            self.logger.info(
                "Embedding provider initialized",
                provider=self.provider_name,
                api_base=self.settings.EMBEDDING_API_BASE,
                model=self.settings.EMBEDDING_MODEL
            )
        except Exception as e:
            if self._session:
                await self._session.close()
                self._session = None
            raise EmbeddingError(f"{self.provider_name} embedding provider initialization failed: {e}")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

        self._initialized = False
        self.logger.info("Embedding provider closed", provider=self.provider_name)

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings over HTTP."""
        self._ensure_initialized()

        if not texts:
            return []

        if any(not text.strip() for text in texts):
            raise EmbeddingError("Cannot embed empty text")

        try:
            embeddings = await self._request_embeddings(texts)
        except EmbeddingError:
            raise
        except Exception as e:
            self.logger.error("Failed to embed texts", provider=self.provider_name, count=len(texts), error=str(e))
            raise EmbeddingError(f"Failed to embed texts via {self.provider_name}: {e}")

        self._remember_dimension(embeddings)
        self.logger.debug(
            "Texts embedded",
            provider=self.provider_name,
            count=len(texts),
            embedding_dim=len(embeddings[0]) if embeddings else 0
        )
        return embeddings

    async def _test_api_connection(self) -> None:
        """Test API connection with a simple embedding request."""
        try:
            self._remember_dimension(await self._request_embeddings(["test"]))
        except Exception as e:
            raise EmbeddingError(f"API connection test failed: {e}")

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.EMBEDDING_API_KEY:
            headers["Authorization"] = f"Bearer {self.settings.EMBEDDING_API_KEY}"
        return headers

    async def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self._session:
            raise EmbeddingError("HTTP session not initialized")

        try:
            async with self._session.post(url, headers=self._headers(), json=payload) as response:
                if response.status == 200:
                    return await response.json()
                error_text = await response.text()
                raise EmbeddingError(f"API request failed: {response.status} - {error_text}")
        except aiohttp.ClientError as e:
            raise EmbeddingError(f"API request error: {e}")

    @abstractmethod
    async def _request_embeddings(self, texts: List[str]) -> List[List[float]]:
        """Send texts to the endpoint and return their embeddings in order."""
        pass

    def get_model_info(self) -> Dict:
        """Get HTTP provider model information."""
        info = super().get_model_info()
        info["api_base"] = self.settings.EMBEDDING_API_BASE
        return info


class ApiEmbeddingProvider(HttpEmbeddingProvider):
    """OpenAI-compatible embedding endpoint."""

    @property
    def provider_name(self) -> str:
        return "api"

    async def _request_embeddings(self, texts: List[str]) -> List[List[float]]:
        url = f"{self.settings.EMBEDDING_API_BASE.rstrip('/')}/v1/embeddings"
        data = await self._post(url, {"model": self.settings.EMBEDDING_MODEL, "input": texts})
        try:
            items = sorted(data["data"], key=lambda item: item.get("index", 0))
            return [item["embedding"] for item in items]
        except (KeyError, TypeError) as e:
            raise EmbeddingError(f"Malformed embedding response: {e}")


class OllamaEmbeddingProvider(HttpEmbeddingProvider):
    """Ollama embedding endpoint (one prompt per request)."""

    @property
    def provider_name(self) -> str:
        return "ollama"

    async def _request_embeddings(self, texts: List[str]) -> List[List[float]]:
        url = f"{self.settings.EMBEDDING_API_BASE.rstrip('/')}/api/embeddings"
        embeddings = []
        for text in texts:
            data = await self._post(url, {"model": self.settings.EMBEDDING_MODEL, "prompt": text})
            embedding = data.get("embedding") if isinstance(data, dict) else None
            if not embedding:
                raise EmbeddingError("Malformed embedding response: missing 'embedding'")
            embeddings.append(embedding)
        return embeddings
