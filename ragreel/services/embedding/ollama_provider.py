"""
Remote embeddings served by an Ollama instance
"""

import logging
import time

import numpy as np
import requests

from ragreel.core.exceptions import ProviderError, ProviderUnavailable
from ragreel.services.embedding.interfaces import EmbeddingProvider

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embeds text through Ollama's /api/embeddings endpoint"""

    supports_concurrency = True

    def __init__(self,
                 base_url: str = "http://localhost:11434",
                 model: str = "nomic-embed-text",
                 timeout: float = 30.0,
                 max_retries: int = 3,
                 session: requests.Session = None):
        """
        Args:
            base_url: Ollama server URL
            model: Embedding model served by Ollama
            timeout: Request timeout in seconds
            max_retries: Attempts per request before giving up
            session: Optional requests session (shared connection pool)
        """
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.session = session or requests.Session()
        self._ready = False

    @property
    def name(self) -> str:
        return f"ollama/{self.model}"

    def initialize(self) -> None:
        if self._ready:
            return

        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ProviderUnavailable(f"Ollama not accessible at {self.base_url}: {e}") from e

        self._ready = True
        logger.info(f"Connected to Ollama at {self.base_url} using model {self.model}")

    def _post_with_retry(self, payload: dict) -> requests.Response:
        for attempt in range(self.max_retries):
            try:
                response = self.session.post(
                    f"{self.base_url}/api/embeddings", json=payload, timeout=self.timeout
                )
                response.raise_for_status()
                return response
            except requests.RequestException as e:
                if attempt == self.max_retries - 1:
                    raise ProviderUnavailable(
                        f"Embedding request failed after {self.max_retries} attempts: {e}"
                    ) from e
                wait_time = 2 ** attempt
                logger.warning(f"Embedding attempt {attempt + 1} failed, retrying in {wait_time}s...")
                time.sleep(wait_time)

    def embed(self, text: str) -> np.ndarray:
        self.initialize()
        response = self._post_with_retry({"model": self.model, "prompt": text})

        try:
            embedding = response.json()["embedding"]
            vector = np.asarray(embedding, dtype=np.float32).reshape(-1)
        except (ValueError, KeyError, TypeError) as e:
            raise ProviderError(f"Malformed embedding response from Ollama: {e}") from e

        if vector.size == 0 or not np.all(np.isfinite(vector)):
            raise ProviderError("Ollama returned an empty or non-numeric embedding")
        return vector
