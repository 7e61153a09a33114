import hashlib
import logging
import re
from typing import List

logger = logging.getLogger(__name__)

# Split after every run of '.', '!' or '?', with or without following whitespace,
# keeping the terminators on the sentence
SENTENCE_SPLIT = re.compile(r'(?<=[.!?])(?![.!?])\s*')

CHUNK_ID_LENGTH = 16


def split_sentences(text: str) -> List[str]:
    """Split text into stripped, non-empty sentences"""
    return [s.strip() for s in SENTENCE_SPLIT.split(text) if s.strip()]


def chunk_text(text: str, max_size: int = 1500) -> List[str]:
    """
    Split text into sentence-aligned chunks of at most max_size characters.

    Sentences are packed greedily into a running buffer. When adding the next
    sentence would push the buffer past max_size, the buffer is flushed and a
    new one starts with that sentence. A single sentence longer than max_size
    is never split; it becomes its own oversized chunk.

    Args:
        text: Text to chunk
        max_size: Maximum chunk length in characters

    Returns:
        List of chunks in input order
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")

    if not text or not text.strip():
        return []

    chunks = []
    current_chunk = ""

    for sentence in split_sentences(text):
        candidate = current_chunk + " " + sentence if current_chunk else sentence

        if current_chunk and len(candidate) > max_size:
            chunks.append(current_chunk)
            current_chunk = sentence
        else:
            current_chunk = candidate

    if current_chunk:
        chunks.append(current_chunk)

    oversized = sum(1 for c in chunks if len(c) > max_size)
    if oversized:
        logger.debug(f"{oversized} single-sentence chunks exceed max_size={max_size}")

    return chunks


def generate_chunk_id(text: str, offset: int, index: int) -> str:
    """Stable 16-character id from chunk text, batch offset and position in batch"""
    digest = hashlib.md5(f"{text}{offset}{index}".encode('utf-8')).hexdigest()
    return digest[:CHUNK_ID_LENGTH]
