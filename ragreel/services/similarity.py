"""
Brute-force cosine ranking over the chunk index
"""

from typing import Any, Callable, Dict, List, Optional

import numpy as np

from ragreel.models.chunk import SearchResult
from ragreel.services.chunk_index import ChunkIndex
from ragreel.services.vector_store import VectorStore

MetadataPredicate = Callable[[Dict[str, Any]], bool]


def cosine_similarity(a, b) -> float:
    """Cosine similarity; 0.0 for zero-magnitude or mismatched vectors"""
    a = np.asarray(a, dtype=np.float64).reshape(-1)
    b = np.asarray(b, dtype=np.float64).reshape(-1)

    if a.shape != b.shape:
        return 0.0

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def rank(query_vector, chunk_index: ChunkIndex, vector_store: VectorStore, k: int,
         predicate: Optional[MetadataPredicate] = None) -> List[SearchResult]:
    """
    Rank indexed chunks against a query vector

    Args:
        query_vector: Query embedding
        chunk_index: Candidate chunks, in insertion order
        vector_store: Stored embeddings
        k: Maximum number of results
        predicate: Optional filter over chunk metadata

    Returns:
        Up to k results, highest score first. Ties keep insertion order and
        chunks without a stored vector score 0.
    """
    if k <= 0:
        return []

    results = []
    for chunk in chunk_index.iter_in_order():
        if predicate is not None and not predicate(chunk.metadata):
            continue

        vector = vector_store.get(chunk.id)
        score = cosine_similarity(query_vector, vector) if vector is not None else 0.0
        results.append(SearchResult(chunk=chunk, score=score))

    # sorted() is stable, so equal scores stay in insertion order
    results = sorted(results, key=lambda r: r.score, reverse=True)
    return results[:k]


def metadata_equals(filters: Dict[str, Any]) -> MetadataPredicate:
    """Predicate matching chunks whose metadata contains every key/value in filters"""
    def predicate(metadata: Dict[str, Any]) -> bool:
        return all(metadata.get(key) == value for key, value in filters.items())
    return predicate
