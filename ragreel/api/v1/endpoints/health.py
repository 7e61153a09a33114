"""
Health check endpoints
"""

from fastapi import APIRouter, Depends

from ragreel.api.v1.dependencies import get_memory
from ragreel.video.memory import VideoMemory

router = APIRouter()


@router.get("/")
async def health_check():
    return {"status": "healthy"}


@router.get("/detailed")
async def detailed_health(memory: VideoMemory = Depends(get_memory)):
    return {"status": "healthy", **memory.get_stats()}
