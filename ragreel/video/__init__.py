from .memory import VideoMemory
from .encoder import FrameSerializer, EncodeResult
from .decoder import FrameDeserializer, DecodeResult
from .codec import FrameCodec, QRFrameCodec
from .container import VideoContainer, OpenCVContainer, FFmpegContainer, build_container
from .config import get_default_config, get_codec_parameters

__all__ = [
    "VideoMemory",
    "FrameSerializer",
    "EncodeResult",
    "FrameDeserializer",
    "DecodeResult",
    "FrameCodec",
    "QRFrameCodec",
    "VideoContainer",
    "OpenCVContainer",
    "FFmpegContainer",
    "build_container",
    "get_default_config",
    "get_codec_parameters",
]
