"""
Search endpoints
"""
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from ragreel.api.v1.dependencies import get_memory, to_http_error
from ragreel.core.exceptions import RagreelError
from ragreel.services.similarity import metadata_equals
from ragreel.video.memory import VideoMemory

router = APIRouter()


class SearchRequest(BaseModel):
    query: str
    top_k: int = 10
    filters: Optional[Dict[str, Any]] = None


class SearchHit(BaseModel):
    id: str
    text: str
    metadata: Dict[str, Any]
    score: float


class SearchResponse(BaseModel):
    results: List[SearchHit]
    query_time_ms: float


@router.post("/", response_model=SearchResponse)
async def search(request: SearchRequest, memory: VideoMemory = Depends(get_memory)):
    """Rank indexed chunks against a query"""
    start_time = time.time()
    predicate = metadata_equals(request.filters) if request.filters else None

    try:
        results = await run_in_threadpool(memory.search, request.query, request.top_k, predicate)
    except RagreelError as e:
        raise to_http_error(e) from e

    return SearchResponse(
        results=[SearchHit(**r.to_dict()) for r in results],
        query_time_ms=(time.time() - start_time) * 1000,
    )
