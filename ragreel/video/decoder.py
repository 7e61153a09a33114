"""
Frame deserializer: QR video + sidecar vector file -> ChunkIndex + VectorStore

Unreadable frames and malformed payloads are skipped and counted; container
and sidecar failures abort the whole decode.
"""

import logging
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from tqdm import tqdm

from ragreel.core.exceptions import FrameUnreadable
from ragreel.services.chunk_index import ChunkIndex
from ragreel.services.vector_store import VectorStore

from .codec import FrameCodec
from .config import MAX_WORKERS
from .container import VideoContainer
from .payload import PayloadErr, PayloadResult, parse_payload
from .sidecar import load_sidecar, sidecar_path_for
from .utils import read_frame

logger = logging.getLogger(__name__)

# Per-frame outcome: a chunk, a rejected payload, or an unreadable image
FrameResult = Union[PayloadResult, FrameUnreadable]


@dataclass
class DecodeResult:
    chunk_index: ChunkIndex
    vector_store: VectorStore
    total_frames: int
    lost_frames: int
    malformed_frames: int
    provider_name: Optional[str] = None

    @property
    def total_chunks(self) -> int:
        return len(self.chunk_index)

    def summary(self) -> Dict[str, Any]:
        return {
            "total_chunks": self.total_chunks,
            "total_frames": self.total_frames,
            "lost_frames": self.lost_frames,
            "malformed_frames": self.malformed_frames,
            "total_vectors": len(self.vector_store),
            "embedding_dim": self.vector_store.dimension,
            "provider": self.provider_name,
        }


class FrameDeserializer:
    """Demuxes a QR video and rebuilds the chunk index from its frames"""

    def __init__(self,
                 frame_codec: FrameCodec,
                 container: VideoContainer,
                 max_workers: int = MAX_WORKERS,
                 temp_dir: Optional[str] = None,
                 show_progress: bool = False):
        self.frame_codec = frame_codec
        self.container = container
        self.max_workers = max(1, max_workers)
        self.temp_dir = temp_dir
        self.show_progress = show_progress

    def _decode_frame(self, frame_number: int, path: Path) -> FrameResult:
        raw = self.frame_codec.decode(read_frame(path))
        if raw is None:
            logger.warning(f"No QR code found in {path.name}")
            return FrameUnreadable(f"Frame {frame_number} ({path.name}) could not be decoded")
        return parse_payload(raw, frame_number)

    def _decode_frames(self, frames: List[Path]) -> List[FrameResult]:
        if not frames:
            return []

        workers = min(self.max_workers, len(frames))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = executor.map(self._decode_frame, range(len(frames)), frames)
            return list(tqdm(results, total=len(frames), desc="Decoding frames", disable=not self.show_progress))

    def decode(self, video_path, sidecar_path=None,
               chunk_index: Optional[ChunkIndex] = None) -> DecodeResult:
        """
        Rebuild chunks and vectors from a video and its sidecar

        Args:
            video_path: Video produced by FrameSerializer.encode
            sidecar_path: Sidecar file (defaults to the video's .emb companion)
            chunk_index: Index to refill; it is cleared only after the video
                and sidecar have been read successfully

        Returns:
            DecodeResult with the rebuilt index, the loaded store and frame counts
        """
        video_path = Path(video_path)
        sidecar_path = Path(sidecar_path) if sidecar_path else sidecar_path_for(video_path)

        with tempfile.TemporaryDirectory(dir=self.temp_dir, prefix="ragreel_demux_") as tmp:
            frames = self.container.demux(video_path, Path(tmp))
            vector_store, provider_name = load_sidecar(sidecar_path)
            results = self._decode_frames(frames)

        if chunk_index is None:
            chunk_index = ChunkIndex()
        chunk_index.clear()

        lost = 0
        malformed = 0
        for frame_number, result in enumerate(results):
            if isinstance(result, FrameUnreadable):
                lost += 1
                continue
            if isinstance(result, PayloadErr):
                malformed += 1
                logger.warning(f"Skipping frame {frame_number}: {result.error}")
                continue
            chunk_index.put(result.chunk)

        if lost or malformed:
            logger.warning(f"{lost} frames unreadable, {malformed} frames malformed out of {len(frames)}")
        logger.info(f"Decoded {len(chunk_index)} chunks from {len(frames)} frames")

        orphaned = sum(1 for chunk_id in vector_store if chunk_id not in chunk_index)
        if orphaned:
            logger.info(f"{orphaned} vectors have no decoded chunk and will be unused")

        return DecodeResult(
            chunk_index=chunk_index,
            vector_store=vector_store,
            total_frames=len(frames),
            lost_frames=lost,
            malformed_frames=malformed,
            provider_name=provider_name,
        )
