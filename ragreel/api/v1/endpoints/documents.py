"""
Document ingestion endpoints
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from ragreel.api.v1.dependencies import get_memory, to_http_error
from ragreel.core.exceptions import RagreelError
from ragreel.video.memory import VideoMemory

router = APIRouter()


class DocumentRequest(BaseModel):
    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DocumentResponse(BaseModel):
    chunk_ids: List[str]
    total_chunks: int


@router.post("/", response_model=DocumentResponse)
async def add_document(request: DocumentRequest, memory: VideoMemory = Depends(get_memory)):
    """Chunk, embed and index a text document"""
    try:
        chunk_ids = await run_in_threadpool(memory.process_text, request.text, request.metadata)
    except RagreelError as e:
        raise to_http_error(e) from e

    return DocumentResponse(chunk_ids=chunk_ids, total_chunks=len(memory.chunk_index))
