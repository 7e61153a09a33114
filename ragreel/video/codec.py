from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import numpy as np

from .config import get_default_config
from .utils import decode_qr, encode_to_qr, qr_to_frame


class FrameCodec(ABC):
    """Abstract payload <-> image interface"""

    @abstractmethod
    def encode(self, payload: str) -> np.ndarray:
        """Render a payload into a BGR frame"""
        pass

    @abstractmethod
    def decode(self, image: np.ndarray) -> Optional[str]:
        """Recover the payload from a frame, None if unreadable"""
        pass


class QRFrameCodec(FrameCodec):
    """QR code frames rendered with qrcode and read back with OpenCV"""

    def __init__(self, qr_config: Optional[Dict[str, Any]] = None):
        self.qr_config = dict(get_default_config()["qr"])
        if qr_config:
            self.qr_config.update({k: v for k, v in qr_config.items() if v is not None})

    @property
    def frame_size(self) -> int:
        return self.qr_config["frame_size"]

    def encode(self, payload: str) -> np.ndarray:
        qr_image = encode_to_qr(payload, self.qr_config)
        return qr_to_frame(qr_image, (self.frame_size, self.frame_size))

    def decode(self, image: np.ndarray) -> Optional[str]:
        return decode_qr(image)
