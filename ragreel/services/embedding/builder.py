from typing import Optional

from ragreel.core.config import Settings
from ragreel.services.embedding.hash_provider import HashEmbeddingProvider
from ragreel.services.embedding.interfaces import EmbeddingProvider
from ragreel.services.embedding.ollama_provider import OllamaEmbeddingProvider

PROVIDERS = ("local", "ollama", "hash")


class EmbeddingProviderBuilder:
    """Constructs the configured embedding provider"""

    @staticmethod
    def build(settings: Optional[Settings] = None) -> EmbeddingProvider:
        settings = settings or Settings()
        kind = settings.embedding_provider.lower()

        if kind == "local":
            # Imported lazily: loading torch is expensive
            from ragreel.services.embedding.sentence_transformer_provider import SentenceTransformerProvider
            return SentenceTransformerProvider(model_name=settings.embedding_model)

        if kind == "ollama":
            return OllamaEmbeddingProvider(
                base_url=settings.ollama_url,
                model=settings.ollama_model,
                timeout=settings.ollama_timeout,
                max_retries=settings.ollama_max_retries,
            )

        if kind == "hash":
            return HashEmbeddingProvider(dimension=settings.hash_dimension)

        raise ValueError(f"Unsupported embedding provider: {kind}. Available: {list(PROVIDERS)}")
