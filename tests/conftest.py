"""Pytest configuration and shared fixtures for MCP Grounding tests."""

import os
import tempfile
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Generator

import pytest
import pytest_asyncio

from mcp_grounding.config.settings import Settings
from mcp_grounding.core.service import RetrievalService
from mcp_grounding.rag.chunking import Chunker
from mcp_grounding.rag.extractors import SourceExtractor
from mcp_grounding.rag.ingestion import IngestionCoordinator
from mcp_grounding.rag.store import IndexRepository
from tests.utils import FakeEmbeddingManager


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with temporary directories and no delays."""
    return Settings(
        _env_file=None,
        DEBUG=True,
        LOG_DIRECTORY=temp_dir / "logs",

        # Storage paths (temporary)
        INDEX_DIRECTORY=temp_dir / "indexes",
        RAG_SOURCE_PATHS=[],
        RAG_EXCLUDE_PATTERNS=[],

        # Chunking
        CHUNK_SIZE=100,
        CHUNK_OVERLAP=50,

        # Embedding settings (mock)
        EMBEDDING_PROVIDER="api",
        EMBEDDING_API_BASE="http://mock-embedding-api:4000",
        EMBEDDING_MODEL="text-embedding-3-small",
        EMBEDDING_VERIFY_ON_STARTUP=False,
        EMBEDDING_MAX_ATTEMPTS=3,
        EMBEDDING_RETRY_BASE_DELAY=0.0,
        EMBEDDING_REQUEST_DELAY=0.0,

        # Retrieval
        MAX_RAG_RESULTS=5,
        RAG_SIMILARITY_THRESHOLD=0.0,
    )


@pytest.fixture
def fake_embeddings() -> FakeEmbeddingManager:
    """Deterministic embedding manager that never touches the network."""
    return FakeEmbeddingManager()


@pytest.fixture
def repository(test_settings: Settings) -> IndexRepository:
    """Index repository rooted in the temporary index directory."""
    return IndexRepository.from_settings(test_settings)


@pytest.fixture
def coordinator(
    test_settings: Settings,
    fake_embeddings: FakeEmbeddingManager,
    repository: IndexRepository,
) -> IngestionCoordinator:
    """Ingestion coordinator wired to the fake embedding manager."""
    return IngestionCoordinator(
        test_settings,
        Chunker.from_settings(test_settings),
        fake_embeddings,
        SourceExtractor(),
        repository,
    )


@pytest_asyncio.fixture
async def retrieval_service(
    test_settings: Settings,
    fake_embeddings: FakeEmbeddingManager,
) -> AsyncGenerator[RetrievalService, None]:
    """Retrieval service backed by the fake embedding manager."""
    service = RetrievalService(test_settings, embedding_manager=fake_embeddings)
    yield service
    await service.close()


@pytest.fixture
def docs_tree(temp_dir: Path) -> Path:
    """A small documentation tree with markdown, text and an ignorable log file."""
    root = temp_dir / "docs"
    (root / "guide").mkdir(parents=True)
    (root / "temp").mkdir()

    (root / "guide" / "install.md").write_text(
        "# Installation\n\n"
        "## Requirements\n\n"
        "The service requires Python 3.11 and a running Ollama daemon.\n\n"
        "## Setup\n\n"
        "Install the package with pip and pull the nomic-embed-text model.\n",
        encoding="utf-8",
    )
    (root / "faq.txt").write_text(
        "Indexes are stored as JSON files next to each other in the index directory.",
        encoding="utf-8",
    )
    (root / "server.log").write_text("ERROR connection refused while embedding chunk", encoding="utf-8")
    (root / "temp" / "scratch.txt").write_text("Temporary notes that must never be indexed.", encoding="utf-8")
    return root


@pytest.fixture
def sample_words() -> Dict[str, Any]:
    """Word sequences of known length for window tests."""
    return {
        "hundred": " ".join(f"word{i}" for i in range(100)),
        "hundred_fifty": " ".join(f"word{i}" for i in range(150)),
    }


# Environment cleanup
@pytest.fixture(autouse=True)
def cleanup_env():
    """Clean up environment variables before/after tests."""
    original_env = dict(os.environ)

    yield

    os.environ.clear()
    os.environ.update(original_env)
