"""
Sidecar vector file

Persists the VectorStore next to the video: same base name, .emb suffix.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

from ragreel.core.exceptions import SidecarError
from ragreel.services.vector_store import VectorStore

from .config import SIDECAR_SUFFIX

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def sidecar_path_for(video_path) -> Path:
    return Path(video_path).with_suffix(SIDECAR_SUFFIX)


def save_sidecar(path, store: VectorStore, provider_name: Optional[str]) -> Path:
    """
    Write the store's flat buffer, offsets, dimension and provider identity

    Args:
        path: Sidecar file path
        store: Vector store to persist
        provider_name: Identity of the embedding provider that made the vectors

    Returns:
        Path written
    """
    path = Path(path)
    data = {
        "format_version": FORMAT_VERSION,
        "embedding_dim": store.dimension,
        "provider": provider_name,
        "index": store.offsets(),
        "embeddings": store.to_flat().tolist(),
    }

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f)
    except OSError as e:
        raise SidecarError(f"Could not write sidecar {path}: {e}") from e

    logger.info(f"Saved {len(store)} vectors to {path}")
    return path


def load_sidecar(path) -> Tuple[VectorStore, Optional[str]]:
    """
    Load a sidecar into a fresh VectorStore

    Returns:
        (store, provider name)

    Raises:
        SidecarError: file missing or not a sidecar record
        DimensionMismatch: vectors inconsistent with the declared dimension
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SidecarError(f"Sidecar file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise SidecarError(f"Could not read sidecar {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("index"), dict) or "embeddings" not in data:
        raise SidecarError(f"Not a sidecar record: {path}")

    version = data.get("format_version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise SidecarError(f"Unsupported sidecar format version {version} in {path}")

    try:
        store = VectorStore.from_flat(data["embeddings"], data["index"], data.get("embedding_dim"))
    except (TypeError, ValueError) as e:
        raise SidecarError(f"Sidecar {path} holds non-numeric data: {e}") from e
    logger.info(f"Loaded {len(store)} vectors (dimension {store.dimension}) from {path}")
    return store, data.get("provider")
