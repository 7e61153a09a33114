"""
Frame serializer: ChunkIndex + VectorStore -> QR video + sidecar vector file
"""

import logging
import os
import tempfile
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from ragreel.core.exceptions import CodecPreflightFailed, ContainerFailure, FrameEncodeError
from ragreel.models.chunk import Chunk
from ragreel.services.chunk_index import ChunkIndex
from ragreel.services.vector_store import VectorStore

from .codec import FrameCodec
from .config import COMPRESS_THRESHOLD, MAX_WORKERS
from .container import VideoContainer
from .payload import PayloadOk, frame_filename, parse_payload, serialize_payload
from .sidecar import save_sidecar, sidecar_path_for
from .utils import read_frame, write_frame

logger = logging.getLogger(__name__)

PREFLIGHT_FRAMES = 3


@dataclass
class EncodeResult:
    video_path: str
    sidecar_path: str
    total_chunks: int
    total_frames: int
    codec: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FrameSerializer:
    """Renders one QR frame per chunk, in index order, and muxes them into a video"""

    def __init__(self,
                 frame_codec: FrameCodec,
                 container: VideoContainer,
                 compress_threshold: int = COMPRESS_THRESHOLD,
                 max_workers: int = MAX_WORKERS,
                 temp_dir: Optional[str] = None,
                 show_progress: bool = False,
                 verify_frames: bool = True):
        """
        Args:
            frame_codec: Payload <-> image codec
            container: Video mux/demux backend
            compress_threshold: Payload length above which frames are gzip-wrapped
            max_workers: Threads used to render frames
            temp_dir: Parent directory for scratch frame directories
            show_progress: Show a progress bar while rendering
            verify_frames: Decode every rendered frame and fail if it does not read back
        """
        self.frame_codec = frame_codec
        self.container = container
        self.compress_threshold = compress_threshold
        self.max_workers = max(1, max_workers)
        self.temp_dir = temp_dir
        self.show_progress = show_progress
        self.verify_frames = verify_frames

    def _render_frame(self, frame_number: int, chunk: Chunk, frame_dir: Path) -> Path:
        path = frame_dir / frame_filename(frame_number)
        try:
            payload = serialize_payload(chunk, self.compress_threshold)
            frame = self.frame_codec.encode(payload)
            readable = not self.verify_frames or self.frame_codec.decode(frame) == payload
            if readable:
                write_frame(frame, path)
        except Exception as e:
            raise FrameEncodeError(f"Failed to render frame {frame_number} for chunk {chunk.id}: {e}") from e

        if not readable:
            raise FrameEncodeError(
                f"Frame {frame_number} for chunk {chunk.id} does not decode back to its payload; "
                f"raise frame_size or lower chunk_size"
            )
        return path

    def _render_frames(self, chunks: List[Chunk], frame_dir: Path) -> List[Path]:
        if not chunks:
            return []

        workers = min(self.max_workers, len(chunks))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._render_frame, n, chunk, frame_dir)
                for n, chunk in enumerate(chunks)
            ]
            iterator = tqdm(futures, desc="Rendering frames", disable=not self.show_progress)
            return [future.result() for future in iterator]

    def verify_codec_roundtrip(self, probe: Chunk, suffix: str = ".mp4") -> None:
        """
        Check that a payload survives frame rendering, muxing and demuxing

        Args:
            probe: Chunk whose payload is pushed through the pipeline
            suffix: Video file suffix to test with

        Raises:
            CodecPreflightFailed: the probe payload did not come back intact
        """
        expected = probe.to_payload()

        with tempfile.TemporaryDirectory(dir=self.temp_dir, prefix="ragreel_preflight_") as tmp:
            tmp_path = Path(tmp)
            frame_dir = tmp_path / "frames"
            out_dir = tmp_path / "decoded"
            frame_dir.mkdir()

            try:
                frames = self._render_frames([probe] * PREFLIGHT_FRAMES, frame_dir)
            except FrameEncodeError as e:
                raise CodecPreflightFailed(f"Probe frame could not be rendered: {e}") from e

            video_path = tmp_path / f"probe{suffix}"
            self.container.mux(frames, video_path)
            decoded_frames = self.container.demux(video_path, out_dir)

            if len(decoded_frames) != PREFLIGHT_FRAMES:
                raise CodecPreflightFailed(
                    f"Codec {self.container.codec_name} returned {len(decoded_frames)} of {PREFLIGHT_FRAMES} probe frames"
                )

            for n, path in enumerate(decoded_frames):
                raw = self.frame_codec.decode(read_frame(path))
                result = parse_payload(raw, n) if raw is not None else None
                if not isinstance(result, PayloadOk) or result.chunk.to_payload() != expected:
                    raise CodecPreflightFailed(
                        f"Probe frame {n} did not survive codec {self.container.codec_name}; "
                        f"lower the crf or pick a lossless codec"
                    )

        logger.info(f"Pre-flight passed for codec {self.container.codec_name}")

    def _largest_chunk(self, chunks: List[Chunk]) -> Chunk:
        return max(chunks, key=lambda c: len(serialize_payload(c, self.compress_threshold)))

    def encode(self, chunk_index: ChunkIndex, vector_store: VectorStore, output_path,
               provider_name: Optional[str] = None, preflight: bool = True) -> EncodeResult:
        """
        Write the video and its sidecar vector file

        Args:
            chunk_index: Chunks to serialize, one frame each, in insertion order
            vector_store: Embeddings persisted to the sidecar
            output_path: Video path; the sidecar goes next to it
            provider_name: Embedding provider identity recorded in the sidecar
            preflight: Round-trip the largest payload through the codec first

        Returns:
            EncodeResult with artifact paths and counts
        """
        output_path = Path(output_path)
        sidecar_path = sidecar_path_for(output_path)
        chunks = list(chunk_index.iter_in_order())

        expected_suffix = "." + self.container.file_type
        if output_path.suffix.lower() != expected_suffix:
            logger.warning(f"Output {output_path.name} does not use the {expected_suffix} extension "
                           f"expected by codec {self.container.codec_name}")

        if preflight and chunks and not self.container.lossless:
            self.verify_codec_roundtrip(self._largest_chunk(chunks), suffix=output_path.suffix or ".mp4")

        logger.info(f"Encoding {len(chunks)} chunks to {output_path}")

        # Artifacts are staged beside the target and only moved into place once both exist
        staged_video = self._staging_path(output_path)
        staged_sidecar = sidecar_path_for(staged_video)

        try:
            with tempfile.TemporaryDirectory(dir=self.temp_dir, prefix="ragreel_frames_") as tmp:
                frame_dir = Path(tmp)
                frames = self._render_frames(chunks, frame_dir)

                if len(frames) != len(chunks):
                    raise FrameEncodeError(f"Rendered {len(frames)} frames for {len(chunks)} chunks")

                self.container.mux(frames, staged_video)

            save_sidecar(staged_sidecar, vector_store, provider_name)
            self._commit(staged_video, output_path)
            self._commit(staged_sidecar, sidecar_path)
        finally:
            self._remove_partial(staged_video, staged_sidecar)

        logger.info(f"Encoded {len(chunks)} chunks to {output_path}")
        return EncodeResult(
            video_path=str(output_path),
            sidecar_path=str(sidecar_path),
            total_chunks=len(chunk_index),
            total_frames=len(frames),
            codec=self.container.codec_name,
        )

    @staticmethod
    def _staging_path(output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        return output_path.with_name(f".{output_path.stem}.{uuid.uuid4().hex[:8]}{output_path.suffix}")

    @staticmethod
    def _commit(staged: Path, target: Path):
        try:
            os.replace(staged, target)
        except OSError as e:
            raise ContainerFailure(f"Could not move {staged.name} to {target}: {e}") from e

    @staticmethod
    def _remove_partial(*paths: Path):
        for path in paths:
            if path.exists():
                path.unlink()
                logger.warning(f"Removed partial artifact {path}")
