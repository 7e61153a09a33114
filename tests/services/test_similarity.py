"""
Tests for cosine ranking
"""

import numpy as np
import pytest

from ragreel.models.chunk import Chunk
from ragreel.services.chunk_index import ChunkIndex
from ragreel.services.similarity import cosine_similarity, metadata_equals, rank
from ragreel.services.vector_store import VectorStore


@pytest.fixture
def corpus():
    """Chunks a, b, c with vectors [1,0], [0,1], [1,0]"""
    index = ChunkIndex()
    store = VectorStore()
    for chunk_id, vector, topic in [("a", [1, 0], "x"), ("b", [0, 1], "y"), ("c", [1, 0], "y")]:
        index.put(Chunk(id=chunk_id, text=f"chunk {chunk_id}", metadata={"topic": topic}))
        store.put(chunk_id, vector)
    return index, store


class TestCosineSimilarity:

    def test_identical_and_orthogonal(self):
        assert cosine_similarity([1, 0], [2, 0]) == pytest.approx(1.0)
        assert cosine_similarity([1, 0], [0, 3]) == pytest.approx(0.0)
        assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0, 0], [1, 0]) == 0.0
        assert cosine_similarity([1, 0], [0, 0]) == 0.0

    def test_shape_mismatch_scores_zero(self):
        assert cosine_similarity([1, 0, 0], [1, 0]) == 0.0

    def test_float32_inputs(self):
        a = np.array([0.6, 0.8], dtype=np.float32)
        assert cosine_similarity(a, a) == pytest.approx(1.0)


class TestRank:

    def test_ties_keep_insertion_order(self, corpus):
        index, store = corpus
        results = rank([1, 0], index, store, 2)

        assert [r.chunk.id for r in results] == ["a", "c"]
        assert [r.score for r in results] == [pytest.approx(1.0), pytest.approx(1.0)]

    def test_scores_descend(self, corpus):
        index, store = corpus
        results = rank([1, 1], index, store, 10)

        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert len(results) == 3

    def test_non_positive_k(self, corpus):
        index, store = corpus
        assert rank([1, 0], index, store, 0) == []
        assert rank([1, 0], index, store, -1) == []

    def test_zero_query_scores_everything_zero(self, corpus):
        index, store = corpus
        results = rank([0, 0], index, store, 3)

        assert [r.score for r in results] == [0.0, 0.0, 0.0]
        assert [r.chunk.id for r in results] == ["a", "b", "c"]

    def test_chunk_without_vector_scores_zero(self, corpus):
        index, store = corpus
        index.put(Chunk(id="orphan", text="no vector"))

        results = rank([1, 0], index, store, 10)

        assert results[-1].chunk.id == "orphan"
        assert results[-1].score == 0.0

    def test_predicate_filters_before_ranking(self, corpus):
        index, store = corpus
        results = rank([1, 0], index, store, 10, metadata_equals({"topic": "y"}))

        assert [r.chunk.id for r in results] == ["c", "b"]

    def test_empty_index(self):
        assert rank([1, 0], ChunkIndex(), VectorStore(), 5) == []
