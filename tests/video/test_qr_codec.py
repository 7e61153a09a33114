"""
QR frame rendering and decoding with the real qrcode and OpenCV libraries
"""

import random

import numpy as np
import pytest

from ragreel.models.chunk import Chunk
from ragreel.services.text_processing import chunk_text, generate_chunk_id
from ragreel.video.codec import QRFrameCodec
from ragreel.video.payload import COMPRESSED_PREFIX, PayloadOk, parse_payload, serialize_payload
from ragreel.video.utils import decode_qr, encode_to_qr, qr_to_frame, read_frame, write_frame

PROSE = [
    "The archive keeps every note as a single frame in the video.",
    "Each frame holds a QR code that carries one chunk of text and its metadata.",
    "Search embeds the question and ranks the stored chunks by cosine similarity.",
    "Lossy codecs smear the module edges, so the pre-flight check tries a real frame first.",
    "A sidecar file next to the video keeps the embeddings in a flat float32 buffer.",
    "Decoding reads the frames back in order and rebuilds the index before searching again.",
    "Researchers often store meeting minutes, design notes and long reading lists this way.",
    "When a frame cannot be read the decoder counts it as lost and carries on with the rest.",
    "Compression keeps the payload small enough for a lower QR version with larger modules.",
    "Metadata such as the source file name and the position in the document travel with each chunk.",
    "The hash provider is deterministic, which makes it handy for offline experiments.",
    "Larger frames give every module more pixels and make decoding more forgiving.",
    "Batches of chunks are embedded together to keep the provider busy.",
    "Nothing in the video depends on a particular embedding model being installed.",
    "Operators can pick a lossless codec when file size matters less than certainty.",
    "Questions about the weather in Lisbon in 1923 rarely match notes about QR codes.",
]


def realistic_chunks(count, seed=7):
    """Full-size chunks of shuffled English prose"""
    rng = random.Random(seed)
    sentences = []
    while len(" ".join(sentences)) < count * 1700:
        sentences.append(rng.choice(PROSE))
    texts = chunk_text(" ".join(sentences), 1500)[:count]
    return [
        Chunk(id=generate_chunk_id(text, 0, i), text=text, metadata={"source": "notes.txt", "index": i},
              sequence_index=i)
        for i, text in enumerate(texts)
    ]


class TestQRFrameCodec:

    @pytest.fixture
    def codec(self):
        return QRFrameCodec()

    def test_frame_geometry(self, codec):
        frame = codec.encode("hello")
        assert frame.shape == (1024, 1024, 3)
        assert frame.dtype == np.uint8

    def test_frame_size_override(self):
        codec = QRFrameCodec({"frame_size": 256, "version": None})
        assert codec.frame_size == 256
        assert codec.encode("hello").shape == (256, 256, 3)

    def test_short_payload_round_trip(self, codec):
        assert codec.decode(codec.encode("hello ragreel")) == "hello ragreel"

    def test_compressed_payload_round_trip(self, codec, temp_dir):
        text = "QR frames carry one chunk each. " * 8
        chunk = Chunk(id=generate_chunk_id(text, 0, 0), text=text.strip(), metadata={"index": 0})
        payload = serialize_payload(chunk)
        assert payload.startswith(COMPRESSED_PREFIX)

        path = temp_dir / "frame_000000.png"
        write_frame(codec.encode(payload), path)
        raw = codec.decode(read_frame(path))

        result = parse_payload(raw)
        assert isinstance(result, PayloadOk)
        assert result.chunk == chunk

    def test_full_size_chunks_round_trip(self, codec):
        chunks = realistic_chunks(12)
        assert len(chunks) == 12
        assert all(len(c.text) > 1300 for c in chunks)

        for chunk in chunks:
            payload = serialize_payload(chunk)
            assert codec.decode(codec.encode(payload)) == payload

    def test_blank_frame_is_unreadable(self, codec):
        assert codec.decode(np.full((512, 512, 3), 255, dtype=np.uint8)) is None

    def test_missing_image_is_unreadable(self, codec):
        assert codec.decode(None) is None
        assert codec.decode(np.zeros((0, 0, 3), dtype=np.uint8)) is None


class TestQRUtils:

    def test_modules_are_whole_pixels(self):
        image = encode_to_qr("pixel perfect", {"frame_size": 512, "border": 3})
        width, height = image.size
        assert width == height
        assert width <= 512

    def test_frame_too_small_for_payload(self):
        with pytest.raises(ValueError):
            encode_to_qr("x" * 200, {"frame_size": 20})

    def test_qr_is_centered(self):
        image = encode_to_qr("center me")
        frame = qr_to_frame(image, (512, 512))

        dark = np.argwhere(frame[:, :, 0] < 128)
        top, left = dark.min(axis=0)
        bottom, right = dark.max(axis=0)
        assert abs(top - (511 - bottom)) <= 1
        assert abs(left - (511 - right)) <= 1

    def test_oversized_image_is_scaled_down(self):
        image = encode_to_qr("big", {"frame_size": 1024, "box_size": 40})
        frame = qr_to_frame(image, (300, 300))
        assert frame.shape == (300, 300, 3)

    def test_decode_qr_none(self):
        assert decode_qr(None) is None

    def test_read_missing_frame(self, temp_dir):
        assert read_frame(temp_dir / "nope.png") is None
