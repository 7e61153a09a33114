"""
Video containers: ordered frame images <-> compressed video file

Frames are exchanged as image files whose lexicographic order is the frame
order. A zero-frame collection is stored as an empty file.
"""

import logging
import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import cv2

from ragreel.core.exceptions import ContainerFailure

from .config import FRAME_PATTERN, VIDEO_CODEC, get_codec_parameters
from .payload import frame_filename
from .utils import read_frame, write_frame

logger = logging.getLogger(__name__)


class VideoContainer(ABC):
    """Abstract mux/demux interface"""

    def __init__(self, codec_name: str, params: Dict[str, Any], fps: Optional[int] = None):
        self.codec_name = codec_name
        self.params = params
        self.fps = fps or params.get("video_fps", 30)

    @property
    def lossless(self) -> bool:
        return bool(self.params.get("lossless"))

    @property
    def file_type(self) -> str:
        return self.params.get("video_file_type", "mp4")

    def mux(self, frame_paths: Sequence[Path], output_path: Path) -> None:
        """Pack frame images, in the given order, into output_path"""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if not frame_paths:
            output_path.write_bytes(b"")
            logger.info(f"Wrote empty video artifact {output_path}")
            return

        self._mux(list(frame_paths), output_path)
        logger.info(f"Muxed {len(frame_paths)} frames into {output_path} ({self.codec_name}, {self.fps} fps)")

    def demux(self, video_path: Path, output_dir: Path) -> List[Path]:
        """Unpack video_path into ordered frame images under output_dir"""
        video_path = Path(video_path)
        if not video_path.exists():
            raise ContainerFailure(f"Video file not found: {video_path}")

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        if video_path.stat().st_size == 0:
            return []

        self._demux(video_path, output_dir)
        frames = sorted(output_dir.glob("frame_*.png"))
        logger.info(f"Extracted {len(frames)} frames from {video_path}")
        return frames

    @abstractmethod
    def _mux(self, frame_paths: List[Path], output_path: Path) -> None:
        pass

    @abstractmethod
    def _demux(self, video_path: Path, output_dir: Path) -> None:
        pass


class OpenCVContainer(VideoContainer):
    """Mux/demux through OpenCV's bundled video backend"""

    def _mux(self, frame_paths: List[Path], output_path: Path) -> None:
        first = read_frame(frame_paths[0])
        if first is None:
            raise ContainerFailure(f"Cannot read frame {frame_paths[0]}")
        height, width = first.shape[:2]

        fourcc = cv2.VideoWriter_fourcc(*self.params["fourcc"])
        writer = cv2.VideoWriter(str(output_path), fourcc, float(self.fps), (width, height))
        if not writer.isOpened():
            raise ContainerFailure(f"Cannot open video writer for {output_path} with codec {self.params['fourcc']}")

        try:
            for path in frame_paths:
                frame = read_frame(path)
                if frame is None or frame.shape[:2] != (height, width):
                    raise ContainerFailure(f"Frame {path.name} is unreadable or has the wrong size")
                writer.write(frame)
        finally:
            writer.release()

    def _demux(self, video_path: Path, output_dir: Path) -> None:
        cap = cv2.VideoCapture(str(video_path))
        if not cap.isOpened():
            raise ContainerFailure(f"Cannot open video file: {video_path}")

        try:
            frame_number = 0
            while True:
                ret, frame = cap.read()
                if not ret or frame is None:
                    break
                write_frame(frame, output_dir / frame_filename(frame_number))
                frame_number += 1
        except IOError as e:
            raise ContainerFailure(f"Failed to extract frames from {video_path}: {e}") from e
        finally:
            cap.release()


class FFmpegContainer(VideoContainer):
    """Mux/demux by shelling out to the ffmpeg binary"""

    def __init__(self, codec_name: str, params: Dict[str, Any], fps: Optional[int] = None,
                 crf: Optional[int] = None, ffmpeg_binary: str = "ffmpeg"):
        super().__init__(codec_name, params, fps)
        self.crf = crf if crf is not None else params.get("video_crf")
        self.ffmpeg_binary = ffmpeg_binary

    def _run(self, args: List[str]) -> None:
        if shutil.which(self.ffmpeg_binary) is None:
            raise ContainerFailure(f"{self.ffmpeg_binary} not found on PATH")

        cmd = [self.ffmpeg_binary, "-y", "-loglevel", "error"] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            raise ContainerFailure(f"ffmpeg exited with {result.returncode}: {result.stderr.strip()}")

    def _mux(self, frame_paths: List[Path], output_path: Path) -> None:
        frame_dir = frame_paths[0].parent
        expected = [frame_dir / frame_filename(i) for i in range(len(frame_paths))]
        if [Path(p) for p in frame_paths] != expected:
            raise ContainerFailure("ffmpeg muxing needs contiguous frame_NNNNNN.png files in one directory")

        args = [
            "-framerate", str(self.fps),
            "-i", str(frame_dir / FRAME_PATTERN),
            "-c:v", self.params["ffmpeg_codec"],
            "-pix_fmt", self.params.get("pix_fmt", "yuv420p"),
        ]
        if self.crf is not None:
            args += ["-crf", str(self.crf)]
        if self.params.get("video_preset"):
            args += ["-preset", self.params["video_preset"]]
        args += shlex.split(self.params.get("extra_ffmpeg_args", ""))
        args.append(str(output_path))

        self._run(args)

    def _demux(self, video_path: Path, output_dir: Path) -> None:
        # ffmpeg numbers output from 1 unless told otherwise
        self._run([
            "-i", str(video_path),
            "-fps_mode", "passthrough",
            "-start_number", "0",
            str(output_dir / FRAME_PATTERN),
        ])


def build_container(codec_name: str = VIDEO_CODEC, fps: Optional[int] = None,
                    crf: Optional[int] = None) -> VideoContainer:
    """Pick the container backend named by the codec table"""
    params = get_codec_parameters(codec_name)

    if params["backend"] == "ffmpeg":
        return FFmpegContainer(codec_name, params, fps=fps, crf=crf)

    if crf is not None:
        logger.warning(f"crf is ignored by the OpenCV backend (codec {codec_name})")
    return OpenCVContainer(codec_name, params, fps=fps)
