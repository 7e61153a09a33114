"""
Embedding Provider Package

Text -> vector capability consumed by the memory pipeline. The concrete
provider is chosen once, at construction time, from settings.

Key Components:
- EmbeddingProvider: Abstract base class for provider implementations
- SentenceTransformerProvider: Local sentence-transformers model
  (import from .sentence_transformer_provider; it pulls in torch)
- OllamaEmbeddingProvider: Remote Ollama HTTP API
- HashEmbeddingProvider: Deterministic offline provider
- EmbeddingProviderBuilder: Builds the configured provider
"""

from .interfaces import EmbeddingProvider
from .hash_provider import HashEmbeddingProvider
from .ollama_provider import OllamaEmbeddingProvider
from .builder import EmbeddingProviderBuilder

__all__ = [
    # Interfaces
    'EmbeddingProvider',

    # Implementations
    'HashEmbeddingProvider',
    'OllamaEmbeddingProvider',

    # Builder
    'EmbeddingProviderBuilder',
]
