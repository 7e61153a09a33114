"""
Pytest configuration for Ragreel tests
"""

import base64
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import numpy as np
import pytest

from ragreel.core.config import Settings
from ragreel.core.exceptions import ContainerFailure, ProviderError
from ragreel.services.embedding import HashEmbeddingProvider
from ragreel.video.codec import FrameCodec
from ragreel.video.container import VideoContainer
from ragreel.video.memory import VideoMemory
from ragreel.video.payload import frame_filename
from ragreel.video.utils import write_frame

# Set environment variable to suppress tokenizer warnings
os.environ['TOKENIZERS_PARALLELISM'] = 'false'

TEST_DIMENSION = 32


class ByteFrameCodec(FrameCodec):
    """Stores payload bytes directly in pixel values; exact through PNG"""

    WIDTH = 64

    def encode(self, payload: str) -> np.ndarray:
        data = payload.encode('utf-8')
        raw = len(data).to_bytes(4, 'big') + data
        row = self.WIDTH * 3
        rows = max(1, -(-len(raw) // row))

        flat = np.zeros(rows * row, dtype=np.uint8)
        flat[:len(raw)] = np.frombuffer(raw, dtype=np.uint8)
        return flat.reshape(rows, self.WIDTH, 3)

    def decode(self, image: np.ndarray) -> Optional[str]:
        if image is None or image.size < 4:
            return None

        flat = image.reshape(-1)
        length = int.from_bytes(bytes(flat[:4]), 'big')
        if length == 0 or length > flat.size - 4:
            return None
        try:
            return bytes(flat[4:4 + length]).decode('utf-8')
        except UnicodeDecodeError:
            return None


class ArchiveContainer(VideoContainer):
    """
    Stores frame PNGs verbatim in a JSON file

    Frames listed in drop come back blank; frames listed in corrupt come back
    carrying a damaged compressed payload.
    """

    def __init__(self, lossless: bool = True, drop=(), corrupt=(), frame_codec: FrameCodec = None):
        super().__init__("archive", {"lossless": lossless, "video_file_type": "mp4"})
        self.drop = set(drop)
        self.corrupt = set(corrupt)
        self.frame_codec = frame_codec or ByteFrameCodec()
        self.mux_calls = 0

    def _mux(self, frame_paths, output_path):
        self.mux_calls += 1
        frames = [base64.b64encode(Path(p).read_bytes()).decode('ascii') for p in frame_paths]
        Path(output_path).write_text(json.dumps(frames))

    def _demux(self, video_path, output_dir):
        frames = json.loads(Path(video_path).read_text())
        for n, data in enumerate(frames):
            path = output_dir / frame_filename(n)
            if n in self.drop:
                write_frame(np.full((8, 8, 3), 255, dtype=np.uint8), path)
            elif n in self.corrupt:
                write_frame(self.frame_codec.encode("GZ:@@not-base64@@"), path)
            else:
                path.write_bytes(base64.b64decode(data))


class BrokenMuxContainer(ArchiveContainer):
    """Leaves a partial file behind and then fails"""

    def _mux(self, frame_paths, output_path):
        Path(output_path).write_bytes(b"partial")
        raise ContainerFailure("disk full")


class CountingProvider(HashEmbeddingProvider):
    """Hash provider that counts embed calls and can fail on chosen text"""

    supports_concurrency = False

    def __init__(self, dimension: int = TEST_DIMENSION, fail_on: Optional[str] = None):
        super().__init__(dimension)
        self.fail_on = fail_on
        self.calls = 0

    def embed(self, text: str) -> np.ndarray:
        self.calls += 1
        if self.fail_on is not None and self.fail_on in text:
            raise ProviderError(f"refusing to embed {text!r}")
        return super().embed(text)


@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs"""
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


@pytest.fixture
def settings():
    """Offline settings: hash embeddings, no pre-flight, no .env lookup"""
    return Settings(
        _env_file=None,
        embedding_provider="hash",
        hash_dimension=TEST_DIMENSION,
        preflight=False,
        max_workers=2,
    )


@pytest.fixture
def hash_provider():
    return HashEmbeddingProvider(dimension=TEST_DIMENSION)


@pytest.fixture
def frame_codec():
    return ByteFrameCodec()


@pytest.fixture
def archive_container():
    return ArchiveContainer()


@pytest.fixture
def memory(settings, hash_provider, frame_codec, archive_container):
    """VideoMemory wired to the in-memory codec and container"""
    return VideoMemory(settings, provider=hash_provider, frame_codec=frame_codec, container=archive_container)


@pytest.fixture
def sample_text():
    return (
        "Machine learning is a subset of artificial intelligence. "
        "Deep learning uses neural networks with many layers. "
        "Natural language processing helps computers understand text. "
        "QR codes store data in a grid of black and white modules. "
        "Video codecs compress frames by discarding detail."
    )


@pytest.fixture
def make_container():
    """Factory for archive containers with chosen losses"""
    return ArchiveContainer


@pytest.fixture
def broken_container():
    return BrokenMuxContainer()


@pytest.fixture
def make_provider():
    """Factory for counting hash providers"""
    return CountingProvider
