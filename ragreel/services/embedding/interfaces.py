from abc import ABC, abstractmethod

import numpy as np


class EmbeddingProvider(ABC):
    """Abstract text -> vector interface"""

    # Whether embed() may be called from several threads at once
    supports_concurrency: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identity, recorded next to the vectors it produced"""
        pass

    @abstractmethod
    def initialize(self) -> None:
        """One-time setup; safe to call repeatedly"""
        pass

    @abstractmethod
    def embed(self, text: str) -> np.ndarray:
        """Embed a single text as a 1-D float32 vector"""
        pass
