"""JSON persistence of per-source indexes."""

import asyncio
import hashlib
import os
import re
from pathlib import Path
from typing import Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import IndexCorruptedError, PersistenceError, RAGError
from ...models.rag import IndexSnapshot
from .core import EmbeddingStore

INDEX_SUFFIX = ".index.json"

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.-]+")


def index_name_for(source_path: Union[str, Path], qualified: bool = False) -> str:
    """Derive a stable index name from the base name of a source path.

    A qualified name appends a short hash of the resolved path, which keeps
    sources sharing a base name (``/a/docs`` and ``/b/docs``) apart.
    """
    path = Path(source_path)
    name = path.name or path.resolve().name
    name = _UNSAFE_NAME_CHARS.sub("_", name).strip("._") or "index"
    if qualified:
        digest = hashlib.sha256(str(path.resolve()).encode("utf-8")).hexdigest()[:8]
        name = f"{name}-{digest}"
    return name


def same_source(first: Union[str, Path], second: Union[str, Path]) -> bool:
    """Whether two source paths point at the same location."""
    return Path(first).resolve() == Path(second).resolve()


class IndexRepository(LoggerMixin):
    """Loads and saves one JSON index document per source."""

    def __init__(self, index_directory: Union[str, Path]) -> None:
        self.index_directory = Path(index_directory)

    @classmethod
    def from_settings(cls, settings: Settings) -> "IndexRepository":
        """Create a repository rooted at the configured index directory."""
        return cls(settings.INDEX_DIRECTORY)

    def index_path(self, index_name: str) -> Path:
        """Location of the persisted index with the given name."""
        return self.index_directory / f"{index_name}{INDEX_SUFFIX}"

    async def load(
        self,
        source_path: Union[str, Path],
        stores: Optional[Mapping[str, EmbeddingStore]] = None,
    ) -> EmbeddingStore:
        """Load the index persisted for a source.

        A missing index yields an empty store. A corrupt index is logged
        and also yields an empty store, so ingestion restarts from scratch.
        When the base name already belongs to another source, either on
        disk or in ``stores``, the source gets a qualified index name and
        the other index is left untouched.
        """
        index_name = index_name_for(source_path)
        path = self.index_path(index_name)
        snapshot = await self._load_snapshot(path)

        owner = self._owner_of(index_name, snapshot, stores)
        if owner is not None and not same_source(owner, source_path):
            index_name = index_name_for(source_path, qualified=True)
            self.logger.warning(
                "Index name already used by another source, using a qualified name",
                source_path=str(source_path),
                other_source=owner,
                index_name=index_name,
            )
            path = self.index_path(index_name)
            snapshot = await self._load_snapshot(path)

        if snapshot is None:
            return EmbeddingStore(index_name=index_name, source_path=str(source_path))

        try:
            store = EmbeddingStore(
                index_name=index_name,
                source_path=str(source_path),
                records=snapshot.chunks,
            )
        except RAGError as e:
            self.logger.warning("Index not consistent, starting empty", index_path=str(path), error=str(e))
            return EmbeddingStore(index_name=index_name, source_path=str(source_path))

        self.logger.info("Index loaded", index_path=str(path), chunk_count=len(store))
        return store

    async def save(self, store: EmbeddingStore) -> Path:
        """Write the full index to storage, replacing the previous snapshot."""
        path = self.index_path(store.index_name)
        payload = store.serialize().model_dump_json(indent=2)
        loop = asyncio.get_event_loop()

        try:
            await loop.run_in_executor(None, self._write_atomic, path, payload)
        except OSError as e:
            self.logger.error("Failed to save index", index_path=str(path), error=str(e))
            raise PersistenceError(f"Failed to save index: {e}", str(path))

        self.logger.debug("Index saved", index_path=str(path), chunk_count=len(store))
        return path

    async def _load_snapshot(self, path: Path) -> Optional[IndexSnapshot]:
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self._read_snapshot, path)
        except IndexCorruptedError as e:
            self.logger.warning("Index not readable, starting empty", index_path=str(path), error=str(e))
            return None

    @staticmethod
    def _owner_of(
        index_name: str,
        snapshot: Optional[IndexSnapshot],
        stores: Optional[Mapping[str, EmbeddingStore]],
    ) -> Optional[str]:
        registered = (stores or {}).get(index_name)
        if registered is not None and registered.source_path:
            return registered.source_path
        if snapshot is not None:
            return snapshot.source_path
        return None

    @staticmethod
    def _read_snapshot(path: Path) -> Optional[IndexSnapshot]:
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise IndexCorruptedError(str(path), str(e))

        try:
            return IndexSnapshot.model_validate_json(content)
        except PydanticValidationError as e:
            raise IndexCorruptedError(str(path), f"{e.error_count()} validation errors")

    @staticmethod
    def _write_atomic(path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f"{path.name}.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)
