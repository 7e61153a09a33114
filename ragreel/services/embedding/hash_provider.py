import hashlib

import numpy as np

from ragreel.services.embedding.interfaces import EmbeddingProvider


class HashEmbeddingProvider(EmbeddingProvider):
    """Deterministic hash-based embeddings.

    Vectors are reproducible for identical text and need no model download,
    which makes this provider useful offline and in tests. Similarity between
    different texts carries no meaning.
    """

    supports_concurrency = True

    def __init__(self, dimension: int = 384):
        if dimension <= 0:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.dimension = dimension

    @property
    def name(self) -> str:
        return f"hash/{self.dimension}"

    def initialize(self) -> None:
        pass

    def embed(self, text: str) -> np.ndarray:
        seed = int.from_bytes(hashlib.sha256(text.encode('utf-8')).digest()[:8], 'little')
        rng = np.random.default_rng(seed)
        vector = rng.standard_normal(self.dimension).astype(np.float32)
        return vector / np.linalg.norm(vector)
