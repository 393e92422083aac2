"""Tests for the in-memory embedding store."""

import math

import numpy as np
import pytest

from mcp_grounding.core.exceptions import RAGError
from mcp_grounding.models.rag import IndexSnapshot
from mcp_grounding.rag.store import EmbeddingStore
from tests.utils import make_chunk


@pytest.fixture
def store() -> EmbeddingStore:
    """Store with three records pointing in known directions."""
    store = EmbeddingStore(index_name="docs", source_path="/data/docs")
    store.append(make_chunk("points along the x axis"), [1.0, 0.0, 0.0])
    store.append(make_chunk("points between x and y"), [1.0, 1.0, 0.0])
    store.append(make_chunk("points along the y axis"), [0.0, 1.0, 0.0])
    return store


class TestAppend:
    """Test appending records."""

    def test_ids_are_positions(self, store: EmbeddingStore):
        assert [record.id for record in store.records] == [0, 1, 2]
        assert len(store) == 3
        assert store.dimension == 3

    def test_fingerprints_are_tracked(self, store: EmbeddingStore):
        assert make_chunk("Points along the X axis!").fingerprint in store.fingerprints

    def test_dimension_mismatch_rejected(self, store: EmbeddingStore):
        with pytest.raises(RAGError):
            store.append(make_chunk("four dimensional vector"), [1.0, 2.0, 3.0, 4.0])
        assert len(store) == 3

    def test_empty_vector_rejected(self):
        store = EmbeddingStore(index_name="empty")
        with pytest.raises(RAGError):
            store.append(make_chunk("no vector at all"), [])

    def test_vectors_stored_as_float32(self):
        store = EmbeddingStore(index_name="precision")
        record = store.append(make_chunk("precision matters here"), [0.1, 0.2])
        assert record.embedding == [float(np.float32(0.1)), float(np.float32(0.2))]


class TestSearch:
    """Test cosine similarity search."""

    def test_results_sorted_by_score(self, store: EmbeddingStore):
        hits = store.search([1.0, 0.2, 0.0], top_k=3, min_score=-1.0)

        scores = [hit.score for hit in hits]
        assert scores == sorted(scores, reverse=True)
        assert hits[0].text == "points along the x axis"
        assert [hit.rank for hit in hits] == [1, 2, 3]
        assert all(hit.index_name == "docs" for hit in hits)

    def test_identical_direction_scores_one(self, store: EmbeddingStore):
        hits = store.search([2.0, 0.0, 0.0], top_k=1, min_score=0.0)
        assert math.isclose(hits[0].score, 1.0, rel_tol=1e-6)

    def test_threshold_filters_results(self, store: EmbeddingStore):
        hits = store.search([1.0, 0.0, 0.0], top_k=5, min_score=0.7)

        assert [hit.text for hit in hits] == ["points along the x axis", "points between x and y"]
        assert all(hit.score >= 0.7 for hit in hits)

    def test_top_k_truncates(self, store: EmbeddingStore):
        assert len(store.search([1.0, 1.0, 0.0], top_k=2, min_score=-1.0)) == 2

    def test_empty_store_returns_empty(self):
        assert EmbeddingStore(index_name="empty").search([1.0, 0.0], top_k=5, min_score=0.0) == []

    def test_zero_norm_query_scores_zero(self, store: EmbeddingStore):
        hits = store.search([0.0, 0.0, 0.0], top_k=3, min_score=-1.0)
        assert [hit.score for hit in hits] == [0.0, 0.0, 0.0]

    def test_zero_norm_record_scores_zero(self):
        store = EmbeddingStore(index_name="zeros")
        store.append(make_chunk("an all zero embedding"), [0.0, 0.0])
        hits = store.search([1.0, 0.0], top_k=1, min_score=-1.0)
        assert hits[0].score == 0.0

    def test_query_dimension_mismatch_raises(self, store: EmbeddingStore):
        with pytest.raises(RAGError):
            store.search([1.0, 0.0], top_k=3, min_score=0.0)

    def test_search_sees_appends(self, store: EmbeddingStore):
        store.search([1.0, 0.0, 0.0], top_k=1, min_score=0.0)
        store.append(make_chunk("points along the z axis"), [0.0, 0.0, 1.0])

        hits = store.search([0.0, 0.0, 1.0], top_k=1, min_score=0.5)
        assert hits[0].text == "points along the z axis"


class TestSerialization:
    """Test snapshot round trips."""

    def test_round_trip_through_json_is_bit_identical(self):
        rng = np.random.default_rng(42)
        store = EmbeddingStore(index_name="random", source_path="/data/random")
        for i in range(5):
            store.append(make_chunk(f"random vector number {i}", source="random.txt"), rng.normal(size=16))

        payload = store.serialize().model_dump_json()
        restored = EmbeddingStore.deserialize(IndexSnapshot.model_validate_json(payload))

        assert restored.index_name == "random"
        assert restored.source_path == "/data/random"
        assert restored.fingerprints == store.fingerprints
        for original, loaded in zip(store.records, restored.records):
            assert original.id == loaded.id
            assert original.text == loaded.text
            assert original.source == loaded.source
            np.testing.assert_array_equal(
                np.asarray(original.embedding, dtype=np.float32).view(np.uint32),
                np.asarray(loaded.embedding, dtype=np.float32).view(np.uint32),
            )

    def test_snapshot_records_dimension(self, store: EmbeddingStore):
        snapshot = store.serialize()
        assert snapshot.dimension == 3
        assert snapshot.dtype == "float32"
        assert len(snapshot.chunks) == 3
