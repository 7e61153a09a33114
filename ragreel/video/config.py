"""
Video processing configuration for Ragreel
Codec settings, QR parameters, and processing defaults

The crf/quality knob controls compression aggressiveness: higher values give
smaller files but blur QR modules until frames stop decoding. Lossy codecs
should be validated with a pre-flight round trip before committing to them.
"""

from typing import Any, Dict, Optional

# QR Code settings
QR_VERSION = None  # 1-40, None = smallest version that fits the payload
QR_ERROR_CORRECTION = 'M'  # L, M, Q, H
QR_BOX_SIZE = 10
QR_BORDER = 3
QR_FILL_COLOR = "black"
QR_BACK_COLOR = "white"
FRAME_SIZE = 1024

# Payloads longer than this are gzip+base64 wrapped before QR encoding
COMPRESS_THRESHOLD = 100

# Frame render/decode threads
MAX_WORKERS = 4

# Artifact naming
FRAME_PATTERN = "frame_%06d.png"
SIDECAR_SUFFIX = ".emb"

# Video codec configurations
MP4V_PARAMETERS = {
    "backend": "opencv",
    "fourcc": "mp4v",
    "video_file_type": "mp4",
    "video_fps": 30,
    "lossless": False,
}

FFV1_PARAMETERS = {
    "backend": "opencv",
    "fourcc": "FFV1",
    "video_file_type": "mkv",
    "video_fps": 30,
    "lossless": True,
}

MJPG_PARAMETERS = {
    "backend": "opencv",
    "fourcc": "MJPG",
    "video_file_type": "avi",
    "video_fps": 30,
    "lossless": False,
}

H264_PARAMETERS = {
    "backend": "ffmpeg",
    "ffmpeg_codec": "libx264",
    "video_file_type": "mp4",
    "video_fps": 30,
    "video_crf": 23,
    "video_preset": "medium",
    "pix_fmt": "yuv420p",
    "extra_ffmpeg_args": "-tune stillimage -x264-params keyint=1",
    "lossless": False,
}

H265_PARAMETERS = {
    "backend": "ffmpeg",
    "ffmpeg_codec": "libx265",
    "video_file_type": "mkv",
    "video_fps": 30,
    "video_crf": 28,
    "video_preset": "slower",
    "pix_fmt": "yuv420p",
    "extra_ffmpeg_args": "-x265-params keyint=1",
    "lossless": False,
}

# Codec mapping
CODEC_PARAMETERS = {
    "mp4v": MP4V_PARAMETERS,
    "ffv1": FFV1_PARAMETERS,
    "mjpg": MJPG_PARAMETERS,
    "h264": H264_PARAMETERS,
    "avc": H264_PARAMETERS,
    "libx264": H264_PARAMETERS,
    "h265": H265_PARAMETERS,
    "hevc": H265_PARAMETERS,
}

# Default video codec
VIDEO_CODEC = 'mp4v'  # Most compatible, needs no external ffmpeg binary


def get_default_config() -> Dict[str, Any]:
    """Get default configuration dictionary"""
    return {
        "qr": {
            "version": QR_VERSION,
            "error_correction": QR_ERROR_CORRECTION,
            "box_size": QR_BOX_SIZE,
            "border": QR_BORDER,
            "fill_color": QR_FILL_COLOR,
            "back_color": QR_BACK_COLOR,
            "frame_size": FRAME_SIZE,
            "compress_threshold": COMPRESS_THRESHOLD,
        },
        "codec": VIDEO_CODEC,
    }


def get_codec_parameters(codec_name: Optional[str] = None) -> Dict[str, Any]:
    """Get codec parameters for specified codec"""
    if codec_name is None:
        return CODEC_PARAMETERS

    codec_name = codec_name.lower()
    if codec_name not in CODEC_PARAMETERS:
        raise ValueError(f"Unsupported codec: {codec_name}. Available: {list(CODEC_PARAMETERS.keys())}")

    return dict(CODEC_PARAMETERS[codec_name])
