import logging
import time
from typing import Optional

import numpy as np
from sentence_transformers import SentenceTransformer

from ragreel.core.exceptions import ProviderError, ProviderUnavailable
from ragreel.services.embedding.interfaces import EmbeddingProvider

logger = logging.getLogger(__name__)


class SentenceTransformerProvider(EmbeddingProvider):
    """Local embedding model loaded through sentence-transformers"""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", device: Optional[str] = None):
        self.model_name = model_name
        self.device = device
        self.model = None
        self.vector_dim = None

    @property
    def name(self) -> str:
        return f"sentence-transformers/{self.model_name}"

    def initialize(self) -> None:
        if self.model is not None:
            return

        logger.info(f"Loading embedding model: {self.model_name}")
        start_time = time.time()
        try:
            self.model = SentenceTransformer(self.model_name, device=self.device)
        except Exception as e:
            raise ProviderUnavailable(f"Could not load embedding model {self.model_name}: {e}") from e

        self.vector_dim = self.model.get_sentence_embedding_dimension()
        logger.info(f"Model loaded in {time.time() - start_time:.2f}s, vector dimension: {self.vector_dim}")

    def embed(self, text: str) -> np.ndarray:
        self.initialize()
        try:
            vector = self.model.encode([text], show_progress_bar=False, convert_to_numpy=True)[0]
        except Exception as e:
            raise ProviderUnavailable(f"Embedding inference failed: {e}") from e

        vector = np.asarray(vector, dtype=np.float32).reshape(-1)
        if vector.size == 0 or not np.all(np.isfinite(vector)):
            raise ProviderError(f"Model {self.model_name} returned an invalid embedding")
        return vector
