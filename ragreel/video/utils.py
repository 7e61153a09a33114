"""
Core utilities for QR code generation, decoding, and frame file I/O
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np
import qrcode
from PIL import Image

from .config import get_default_config

logger = logging.getLogger(__name__)


def encode_to_qr(data: str, qr_config: Optional[Dict[str, Any]] = None) -> Image.Image:
    """
    Encode data to a QR code image sized to fit the configured frame

    Modules are rendered at a whole number of pixels each so that no
    resampling is needed later.

    Args:
        data: String data to encode
        qr_config: QR settings (defaults from get_default_config()["qr"])

    Returns:
        PIL Image of QR code

    Raises:
        ValueError: the payload needs more modules than the frame has pixels
        qrcode.exceptions.DataOverflowError: the payload exceeds QR capacity
    """
    config = dict(get_default_config()["qr"])
    if qr_config:
        config.update({k: v for k, v in qr_config.items() if v is not None})

    qr = qrcode.QRCode(
        version=config.get("version"),
        error_correction=getattr(qrcode.constants, f"ERROR_CORRECT_{config['error_correction']}"),
        box_size=1,
        border=config["border"],
    )

    qr.add_data(data)
    qr.make(fit=True)

    total_modules = qr.modules_count + 2 * config["border"]
    box_size = config["frame_size"] // total_modules
    if box_size < 1:
        raise ValueError(
            f"QR code needs {total_modules} modules but frame is only {config['frame_size']}px wide"
        )
    qr.box_size = min(box_size, config.get("box_size") or box_size)

    img = qr.make_image(fill_color=config["fill_color"], back_color=config["back_color"])
    return img.get_image() if hasattr(img, "get_image") else img


def qr_to_frame(qr_image: Image.Image, frame_size: Tuple[int, int]) -> np.ndarray:
    """
    Center a QR image on a white frame

    Args:
        qr_image: PIL Image of QR code
        frame_size: Target frame size (width, height)

    Returns:
        OpenCV frame array (BGR format)
    """
    target_width, target_height = frame_size
    width, height = qr_image.size

    if width > target_width or height > target_height:
        # Downscale with NEAREST so module edges stay sharp
        scale = min(target_width / width, target_height / height)
        qr_image = qr_image.resize((int(width * scale), int(height * scale)), Image.Resampling.NEAREST)
        width, height = qr_image.size

    if qr_image.mode != 'RGB':
        qr_image = qr_image.convert('RGB')

    frame_rgb = Image.new('RGB', (target_width, target_height), color='white')
    frame_rgb.paste(qr_image, ((target_width - width) // 2, (target_height - height) // 2))

    img_array = np.array(frame_rgb, dtype=np.uint8)
    return cv2.cvtColor(img_array, cv2.COLOR_RGB2BGR)


def decode_qr(image: np.ndarray) -> Optional[str]:
    """
    Decode QR code from image array

    Args:
        image: OpenCV image array (BGR format)

    Returns:
        Decoded string or None if decode fails
    """
    if image is None or image.size == 0:
        return None

    # ArUco detector first: it reads dense high-version codes
    for detector in (cv2.QRCodeDetectorAruco(), cv2.QRCodeDetector()):
        try:
            data, bbox, straight_qrcode = detector.detectAndDecode(image)
        except cv2.error as e:
            logger.debug(f"QR decode failed with {type(detector).__name__}: {e}")
            continue
        if data:
            return data

    return None


def write_frame(frame: np.ndarray, path: Path):
    """Write a frame as a lossless PNG"""
    if not cv2.imwrite(str(path), frame):
        raise IOError(f"Could not write frame to {path}")


def read_frame(path: Path) -> Optional[np.ndarray]:
    """Read a frame image, None if unreadable"""
    frame = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if frame is None:
        logger.warning(f"Could not read frame image {Path(path).name}")
    return frame
