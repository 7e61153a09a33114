from functools import lru_cache

from fastapi import HTTPException

from ragreel.core.config import get_settings
from ragreel.core.exceptions import (
    CodecPreflightFailed,
    ContainerFailure,
    DimensionMismatch,
    FrameEncodeError,
    IdCollision,
    ProviderError,
    ProviderUnavailable,
    RagreelError,
    SidecarError,
)
from ragreel.video.memory import VideoMemory


@lru_cache(maxsize=1)
def get_memory() -> VideoMemory:
    """Single VideoMemory shared by every request"""
    return VideoMemory(get_settings())


def to_http_error(error: RagreelError) -> HTTPException:
    """Map pipeline errors onto HTTP status codes"""
    if isinstance(error, (ProviderUnavailable, ProviderError)):
        return HTTPException(status_code=503, detail=f"Embedding provider error: {error}")
    if isinstance(error, (DimensionMismatch, IdCollision)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, CodecPreflightFailed):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, (ContainerFailure, SidecarError, FrameEncodeError)):
        return HTTPException(status_code=500, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
