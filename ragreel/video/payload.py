"""
Canonical frame payload

Each frame carries one chunk as compact JSON {id, text, metadata}. Payloads
over the compression threshold are gzip-compressed and base64-encoded behind
a "GZ:" prefix; the gzip CRC rejects damaged data instead of returning it.
"""

import base64
import binascii
import gzip
import json
import zlib
from dataclasses import dataclass
from typing import Any, Dict, Union

from pydantic import BaseModel, Field, ValidationError

from ragreel.core.exceptions import MalformedPayload
from ragreel.models.chunk import Chunk
from ragreel.services.text_processing import CHUNK_ID_LENGTH

from .config import COMPRESS_THRESHOLD

COMPRESSED_PREFIX = "GZ:"


class FramePayload(BaseModel):
    id: str = Field(min_length=CHUNK_ID_LENGTH, max_length=CHUNK_ID_LENGTH)
    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


@dataclass
class PayloadOk:
    chunk: Chunk


@dataclass
class PayloadErr:
    error: MalformedPayload


PayloadResult = Union[PayloadOk, PayloadErr]


def frame_filename(frame_number: int) -> str:
    """Zero-padded frame name; lexicographic order equals sequence order"""
    return f"frame_{frame_number:06d}.png"


def serialize_payload(chunk: Chunk, compress_threshold: int = COMPRESS_THRESHOLD) -> str:
    """Serialize a chunk into the ASCII text carried by one frame"""
    data = json.dumps(chunk.to_payload(), ensure_ascii=True, separators=(",", ":"))

    if len(data) > compress_threshold:
        compressed = gzip.compress(data.encode('ascii'), mtime=0)
        data = COMPRESSED_PREFIX + base64.b64encode(compressed).decode('ascii')

    return data


def parse_payload(raw: str, frame_number: int = 0) -> PayloadResult:
    """
    Parse frame text back into a Chunk

    Args:
        raw: Text decoded from a frame
        frame_number: Frame position, used when metadata has no sequence index

    Returns:
        PayloadOk with the chunk, or PayloadErr describing why it was rejected
    """
    data = raw
    if data.startswith(COMPRESSED_PREFIX):
        try:
            data = gzip.decompress(base64.b64decode(data[len(COMPRESSED_PREFIX):], validate=True)).decode('utf-8')
        except (binascii.Error, OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
            return PayloadErr(MalformedPayload(f"Frame {frame_number}: corrupt compressed payload: {e}"))

    try:
        payload = FramePayload.model_validate_json(data)
    except ValidationError as e:
        return PayloadErr(MalformedPayload(f"Frame {frame_number}: invalid chunk record: {e.error_count()} errors"))

    sequence_index = payload.metadata.get("index", frame_number)
    if not isinstance(sequence_index, int) or isinstance(sequence_index, bool):
        sequence_index = frame_number

    return PayloadOk(Chunk(
        id=payload.id,
        text=payload.text,
        metadata=payload.metadata,
        sequence_index=sequence_index,
    ))
