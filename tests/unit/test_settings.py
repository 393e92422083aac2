"""Tests for configuration settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mcp_grounding.config.settings import Settings


class TestSettings:
    """Test settings defaults and validation."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("EMBEDDING_PROVIDER", raising=False)
        settings = Settings(_env_file=None)

        assert settings.CHUNK_SIZE == 100
        assert settings.CHUNK_OVERLAP == 50
        assert settings.MIN_CHUNK_LENGTH == 10
        assert settings.EMBEDDING_PROVIDER == "ollama"
        assert settings.EMBEDDING_MODEL == "nomic-embed-text"
        assert settings.EMBEDDING_API_BASE == "http://localhost:11434"
        assert settings.EMBEDDING_MAX_ATTEMPTS == 3
        assert settings.MAX_RAG_RESULTS == 5
        assert settings.RAG_SIMILARITY_THRESHOLD == 0.7

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CHUNK_SIZE", "200")
        monkeypatch.setenv("RAG_SOURCE_PATHS", '["./docs", "./manual.pdf"]')

        settings = Settings(_env_file=None)

        assert settings.CHUNK_SIZE == 200
        assert settings.RAG_SOURCE_PATHS == ["./docs", "./manual.pdf"]

    def test_overlap_must_be_smaller_than_size(self):
        with pytest.raises(ValidationError, match="CHUNK_OVERLAP"):
            Settings(_env_file=None, CHUNK_SIZE=50, CHUNK_OVERLAP=50)

    def test_min_length_not_above_max(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MIN_CHUNK_LENGTH=500, MAX_CHUNK_LENGTH=100)

    def test_create_directories(self, temp_dir: Path):
        settings = Settings(
            _env_file=None,
            INDEX_DIRECTORY=temp_dir / "data" / "indexes",
            LOG_DIRECTORY=temp_dir / "logs",
        )

        settings.create_directories()

        assert (temp_dir / "data" / "indexes").is_dir()
        assert (temp_dir / "logs").is_dir()
