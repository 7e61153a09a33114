"""
Tests for the frame payload format
"""

import json

import pytest

from ragreel.core.exceptions import MalformedPayload
from ragreel.models.chunk import Chunk
from ragreel.services.text_processing import generate_chunk_id
from ragreel.video.payload import (
    COMPRESSED_PREFIX,
    PayloadErr,
    PayloadOk,
    frame_filename,
    parse_payload,
    serialize_payload,
)


def make_chunk(text, index=0, **metadata):
    return Chunk(
        id=generate_chunk_id(text, 0, index),
        text=text,
        metadata={"index": index, **metadata},
        sequence_index=index,
    )


class TestSerializePayload:

    def test_short_payload_is_plain_json(self):
        chunk = make_chunk("Tiny.")
        raw = serialize_payload(chunk)

        assert not raw.startswith(COMPRESSED_PREFIX)
        assert json.loads(raw) == {"id": chunk.id, "text": "Tiny.", "metadata": {"index": 0}}
        assert " " not in raw.replace("Tiny.", "")

    def test_long_payload_is_compressed(self):
        chunk = make_chunk("A fairly long sentence about video frames. " * 10)
        raw = serialize_payload(chunk)

        assert raw.startswith(COMPRESSED_PREFIX)
        assert raw.isascii()
        assert len(raw) < len(json.dumps(chunk.to_payload()))

    def test_threshold_is_configurable(self):
        chunk = make_chunk("Tiny.")
        assert serialize_payload(chunk, compress_threshold=5).startswith(COMPRESSED_PREFIX)

    def test_non_ascii_text_is_escaped(self):
        chunk = make_chunk("Café au lait ☕ 日本語.")
        raw = serialize_payload(chunk, compress_threshold=10_000)
        assert raw.isascii()

    def test_serialization_is_deterministic(self):
        chunk = make_chunk("Repeatable output please. " * 10)
        assert serialize_payload(chunk) == serialize_payload(chunk)


class TestParsePayload:

    @pytest.mark.parametrize("text", [
        "Tiny.",
        "A fairly long sentence about video frames. " * 10,
        "Café au lait ☕ 日本語.",
    ])
    def test_round_trip(self, text):
        chunk = make_chunk(text, index=4, source="doc.txt")

        result = parse_payload(serialize_payload(chunk), frame_number=9)

        assert isinstance(result, PayloadOk)
        assert result.chunk == chunk

    def test_sequence_index_falls_back_to_frame_number(self):
        chunk = Chunk(id="0123456789abcdef", text="No index.")
        result = parse_payload(serialize_payload(chunk), frame_number=7)

        assert isinstance(result, PayloadOk)
        assert result.chunk.sequence_index == 7

    def test_boolean_index_is_not_a_sequence_index(self):
        chunk = Chunk(id="0123456789abcdef", text="Odd metadata.", metadata={"index": True})
        result = parse_payload(serialize_payload(chunk), frame_number=3)
        assert result.chunk.sequence_index == 3

    @pytest.mark.parametrize("raw", [
        "not json at all",
        '{"id": "short", "text": "x", "metadata": {}}',
        '{"id": "0123456789abcdef", "metadata": {}}',
        '{"id": "0123456789abcdef", "text": "x", "metadata": [1, 2]}',
        '[1, 2, 3]',
        "GZ:@@not-base64@@",
        "GZ:aGVsbG8gd29ybGQ=",
    ])
    def test_malformed_payloads(self, raw):
        result = parse_payload(raw, frame_number=2)

        assert isinstance(result, PayloadErr)
        assert isinstance(result.error, MalformedPayload)
        assert "Frame 2" in str(result.error)

    def test_damaged_compressed_payload_is_rejected(self):
        raw = serialize_payload(make_chunk("Compress me, then break me. " * 12))
        assert raw.startswith(COMPRESSED_PREFIX)

        middle = len(raw) // 2
        damaged = raw[:middle] + ("A" if raw[middle] != "A" else "B") + raw[middle + 1:]

        assert isinstance(parse_payload(damaged), PayloadErr)
        assert isinstance(parse_payload(raw[:-8]), PayloadErr)


class TestFrameFilename:

    def test_zero_padded(self):
        assert frame_filename(0) == "frame_000000.png"
        assert frame_filename(42) == "frame_000042.png"

    def test_lexicographic_order_matches_numeric(self):
        names = [frame_filename(n) for n in (10, 2, 100, 1)]
        assert sorted(names) == [frame_filename(n) for n in (1, 2, 10, 100)]
