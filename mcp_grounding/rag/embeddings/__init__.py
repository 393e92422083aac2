"""
Embedding generation for the retrieval engine.

Provider backends:

- **Ollama Provider**: Ollama's `/api/embeddings` endpoint (default)
- **API Provider**: external OpenAI-compatible `/v1/embeddings` endpoints
- **Local Provider**: sentence-transformers running in-process

EmbeddingManager selects the backend from `EMBEDDING_PROVIDER` and is the
only object the ingestion and query paths talk to. Provider failures surface
as EmbeddingError so callers can retry them.
"""

from .manager import EmbeddingManager

__all__ = ["EmbeddingManager"]
