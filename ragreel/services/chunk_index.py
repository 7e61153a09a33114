from typing import Dict, Iterator, List, Optional

from ragreel.models.chunk import Chunk


class ChunkIndex:
    """Ordered id -> Chunk mapping; iteration order is first-seen insertion order"""

    def __init__(self):
        self._chunks: Dict[str, Chunk] = {}

    def __len__(self) -> int:
        return len(self._chunks)

    def __contains__(self, chunk_id: str) -> bool:
        return chunk_id in self._chunks

    def __iter__(self) -> Iterator[Chunk]:
        return self.iter_in_order()

    def put(self, chunk: Chunk):
        # Overwriting keeps the original position in a dict
        self._chunks[chunk.id] = chunk

    def get(self, chunk_id: str) -> Optional[Chunk]:
        return self._chunks.get(chunk_id)

    def clear(self):
        self._chunks.clear()

    def iter_in_order(self) -> Iterator[Chunk]:
        return iter(list(self._chunks.values()))

    def ids(self) -> List[str]:
        return list(self._chunks)
