"""
Packed embedding store
All vectors live back-to-back in one float32 buffer; ids map to element offsets
"""

import logging
from typing import Dict, Iterator, Optional, Sequence, Union

import numpy as np

from ragreel.core.exceptions import DimensionMismatch, IdCollision

logger = logging.getLogger(__name__)

INITIAL_CAPACITY = 1024

VectorLike = Union[np.ndarray, Sequence[float]]


class VectorStore:
    """
    Append-only embedding arena.

    The dimension is fixed by the first stored vector. The backing buffer grows
    by doubling, so offsets handed out by put() stay valid across reallocation
    and are never reused.
    """

    def __init__(self, dimension: Optional[int] = None, initial_capacity: int = INITIAL_CAPACITY):
        self.dimension = dimension
        self._buffer = np.zeros(max(initial_capacity, 0), dtype=np.float32)
        self._size = 0
        self._offsets: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._offsets)

    def __contains__(self, chunk_id: str) -> bool:
        return chunk_id in self._offsets

    def __iter__(self) -> Iterator[str]:
        return iter(self._offsets)

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    @property
    def used(self) -> int:
        """Number of buffer elements holding vectors"""
        return self._size

    def offset(self, chunk_id: str) -> Optional[int]:
        return self._offsets.get(chunk_id)

    def offsets(self) -> Dict[str, int]:
        return dict(self._offsets)

    def _as_vector(self, vector: VectorLike) -> np.ndarray:
        array = np.asarray(vector, dtype=np.float32)
        if array.ndim != 1:
            array = array.reshape(-1)
        return array

    def _ensure_capacity(self, required: int):
        if required <= len(self._buffer):
            return

        new_capacity = max(len(self._buffer), 1)
        while new_capacity < required:
            new_capacity *= 2

        grown = np.zeros(new_capacity, dtype=np.float32)
        grown[:self._size] = self._buffer[:self._size]
        self._buffer = grown
        logger.debug(f"Vector buffer grown to {new_capacity} elements")

    def put(self, chunk_id: str, vector: VectorLike) -> int:
        """
        Append a vector for chunk_id

        Returns:
            Element offset of the stored vector

        Raises:
            DimensionMismatch: vector length differs from the store dimension
            IdCollision: chunk_id already has a vector
        """
        array = self._as_vector(vector)

        if self.dimension is not None and len(array) != self.dimension:
            raise DimensionMismatch(self.dimension, len(array))

        if chunk_id in self._offsets:
            raise IdCollision(chunk_id, f"Vector already stored for chunk {chunk_id}")

        if self.dimension is None:
            if len(array) == 0:
                raise DimensionMismatch(0, 0, "Cannot establish a zero-length vector dimension")
            self.dimension = len(array)
            logger.info(f"Vector store dimension set to {self.dimension}")

        offset = self._size
        self._ensure_capacity(offset + self.dimension)
        self._buffer[offset:offset + self.dimension] = array
        self._size = offset + self.dimension
        self._offsets[chunk_id] = offset
        return offset

    def get(self, chunk_id: str) -> Optional[np.ndarray]:
        """Copy of the stored vector, or None if chunk_id has none"""
        offset = self._offsets.get(chunk_id)
        if offset is None:
            return None
        return self._buffer[offset:offset + self.dimension].copy()

    def to_flat(self) -> np.ndarray:
        """Used portion of the buffer, in storage order"""
        return self._buffer[:self._size].copy()

    @classmethod
    def from_flat(cls, buffer: VectorLike, offsets: Dict[str, int],
                  dimension: Optional[int]) -> "VectorStore":
        """
        Rebuild a store from a flat buffer and its offset map

        Raises:
            DimensionMismatch: buffer and offsets are not consistent with dimension
        """
        flat = np.asarray(buffer, dtype=np.float32).reshape(-1)

        if dimension is None:
            if len(flat) or offsets:
                raise DimensionMismatch(0, len(flat), "Vectors present but no dimension declared")
            return cls()

        if dimension <= 0:
            raise DimensionMismatch(dimension, dimension, f"Invalid embedding dimension: {dimension}")

        if len(flat) % dimension != 0:
            raise DimensionMismatch(
                dimension, len(flat),
                f"Buffer length {len(flat)} is not a multiple of dimension {dimension}"
            )

        for chunk_id, offset in offsets.items():
            offset = int(offset)
            if offset < 0 or offset % dimension != 0 or offset + dimension > len(flat):
                raise DimensionMismatch(
                    dimension, len(flat),
                    f"Offset {offset} for chunk {chunk_id} is inconsistent with dimension {dimension}"
                )

        store = cls(dimension=dimension, initial_capacity=len(flat))
        store._buffer[:len(flat)] = flat
        store._size = len(flat)
        store._offsets = {chunk_id: int(offset) for chunk_id, offset in offsets.items()}
        return store
