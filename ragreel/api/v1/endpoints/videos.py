"""
Video encode/decode endpoints
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from ragreel.api.v1.dependencies import get_memory, to_http_error
from ragreel.core.exceptions import RagreelError
from ragreel.video.memory import VideoMemory

router = APIRouter()


class EncodeRequest(BaseModel):
    output_path: str
    preflight: Optional[bool] = None


class EncodeResponse(BaseModel):
    video_path: str
    sidecar_path: str
    total_chunks: int
    total_frames: int
    codec: str


class DecodeRequest(BaseModel):
    input_path: str
    sidecar_path: Optional[str] = None


class DecodeResponse(BaseModel):
    total_chunks: int
    total_frames: int
    lost_frames: int
    malformed_frames: int
    total_vectors: int
    embedding_dim: Optional[int] = None
    provider: Optional[str] = None


@router.post("/encode", response_model=EncodeResponse)
async def encode_video(request: EncodeRequest, memory: VideoMemory = Depends(get_memory)):
    """Write the current memory to a QR video and sidecar file"""
    try:
        result = await run_in_threadpool(memory.encode, request.output_path, request.preflight)
    except RagreelError as e:
        raise to_http_error(e) from e
    return EncodeResponse(**result.to_dict())


@router.post("/decode", response_model=DecodeResponse)
async def decode_video(request: DecodeRequest, memory: VideoMemory = Depends(get_memory)):
    """Replace the current memory with the contents of a video"""
    if not Path(request.input_path).exists():
        raise HTTPException(status_code=404, detail=f"Video file not found: {request.input_path}")

    try:
        result = await run_in_threadpool(memory.decode, request.input_path, request.sidecar_path)
    except RagreelError as e:
        raise to_http_error(e) from e
    return DecodeResponse(**result.summary())
