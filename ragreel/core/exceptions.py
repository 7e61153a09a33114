"""
Error taxonomy for Ragreel

Pipeline-level errors (provider, dimension, container, sidecar) propagate to
the caller. Per-frame errors (FrameUnreadable, MalformedPayload) are absorbed
by the decoder and surfaced as counts.
"""


class RagreelError(Exception):
    """Base class for all Ragreel errors"""


class ProviderUnavailable(RagreelError):
    """Embedding provider setup or call failed"""


class ProviderError(RagreelError):
    """Embedding provider returned a malformed response"""


class DimensionMismatch(RagreelError):
    """Vector length does not match the established store dimension"""

    def __init__(self, expected: int, actual: int, message: str = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Vector dimension mismatch: expected {expected}, got {actual}")


class IdCollision(RagreelError):
    """Two different chunks produced the same identifier"""

    def __init__(self, chunk_id: str, message: str = None):
        self.chunk_id = chunk_id
        super().__init__(message or f"Chunk id collision: {chunk_id}")


class FrameUnreadable(RagreelError):
    """A barcode frame could not be decoded"""


class MalformedPayload(RagreelError):
    """Decoded frame bytes did not parse as a chunk record"""


class FrameEncodeError(RagreelError):
    """A chunk could not be rendered into a barcode frame"""


class ContainerFailure(RagreelError):
    """Video mux or demux failed"""


class CodecPreflightFailed(ContainerFailure):
    """Probe frame did not survive the configured video codec"""


class SidecarError(RagreelError):
    """Sidecar vector file is missing or unreadable"""
