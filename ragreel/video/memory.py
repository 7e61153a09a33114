"""
Video memory - chunk, embed, search, and round-trip a knowledge base through a QR video

One VideoMemory owns one ChunkIndex and one VectorStore. Only process_text()
and decode() mutate them. Every public operation takes the memory's lock, so
concurrent callers (API worker threads) run one at a time.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from ragreel.core.config import Settings
from ragreel.core.exceptions import IdCollision
from ragreel.models.chunk import Chunk, SearchResult
from ragreel.services.chunk_index import ChunkIndex
from ragreel.services.embedding import EmbeddingProvider, EmbeddingProviderBuilder
from ragreel.services.similarity import MetadataPredicate, rank
from ragreel.services.text_processing import chunk_text, generate_chunk_id
from ragreel.services.vector_store import VectorStore

from .codec import FrameCodec, QRFrameCodec
from .container import VideoContainer, build_container
from .decoder import DecodeResult, FrameDeserializer
from .encoder import EncodeResult, FrameSerializer

logger = logging.getLogger(__name__)


class VideoMemory:
    """Text knowledge base that can be stored in, and restored from, a QR code video"""

    def __init__(self,
                 settings: Optional[Settings] = None,
                 provider: Optional[EmbeddingProvider] = None,
                 frame_codec: Optional[FrameCodec] = None,
                 container: Optional[VideoContainer] = None,
                 show_progress: bool = False):
        """
        Args:
            settings: Configuration (defaults read from the environment)
            provider: Embedding provider (defaults to the configured one)
            frame_codec: Frame codec (defaults to QR frames)
            container: Video container (defaults to the configured codec)
            show_progress: Show progress bars for long-running steps
        """
        self.settings = settings or Settings()
        self.provider = provider or EmbeddingProviderBuilder.build(self.settings)
        self.frame_codec = frame_codec or QRFrameCodec({
            "version": self.settings.qr_version,
            "error_correction": self.settings.qr_error_correction,
            "border": self.settings.qr_border,
            "frame_size": self.settings.frame_size,
        })
        self.container = container or build_container(
            self.settings.video_codec, fps=self.settings.video_fps, crf=self.settings.video_crf
        )
        self.show_progress = show_progress

        self.chunk_index = ChunkIndex()
        self.vector_store = VectorStore()
        self._lock = threading.RLock()

        self.serializer = FrameSerializer(
            self.frame_codec,
            self.container,
            compress_threshold=self.settings.compress_threshold,
            max_workers=self.settings.max_workers,
            temp_dir=self.settings.temp_dir,
            show_progress=show_progress,
        )
        self.deserializer = FrameDeserializer(
            self.frame_codec,
            self.container,
            max_workers=self.settings.max_workers,
            temp_dir=self.settings.temp_dir,
            show_progress=show_progress,
        )

    def initialize(self):
        self.provider.initialize()

    # ------------------------------------------------------------------ ingest

    def process_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[str]:
        """
        Chunk, embed and index a document

        Chunks are committed one at a time. If the provider fails part way
        through, chunks committed before the failure stay in the store.

        Args:
            text: Document text
            metadata: Metadata copied onto every chunk

        Returns:
            Chunk ids in document order
        """
        chunks = chunk_text(text, self.settings.chunk_size)
        if not chunks:
            return []

        with self._lock:
            self.initialize()
            metadata = metadata or {}
            batch_size = max(1, self.settings.batch_size)

            chunk_ids = []
            batches = range(0, len(chunks), batch_size)
            for offset in tqdm(batches, desc="Embedding chunks", disable=not self.show_progress):
                batch = chunks[offset:offset + batch_size]
                chunk_ids.extend(self._process_batch(batch, metadata, offset))

            logger.info(f"Indexed {len(chunk_ids)} chunks ({len(self.chunk_index)} total)")
            return chunk_ids

    def _process_batch(self, texts: List[str], metadata: Dict[str, Any], offset: int) -> List[str]:
        pending = []
        chunk_ids = []

        for i, text in enumerate(texts):
            chunk = Chunk(
                id=generate_chunk_id(text, offset, i),
                text=text,
                metadata={**metadata, "index": offset + i},
                sequence_index=offset + i,
            )
            chunk_ids.append(chunk.id)

            existing = self.chunk_index.get(chunk.id)
            if existing is not None and existing.text != chunk.text:
                raise IdCollision(chunk.id, f"Chunk id {chunk.id} already used by different text")

            if chunk.id in self.vector_store:
                # Same text re-processed: refresh the record, keep the vector
                self.chunk_index.put(chunk)
            else:
                pending.append(chunk)

        for chunk, vector in self._embed(pending):
            self.vector_store.put(chunk.id, vector)
            self.chunk_index.put(chunk)

        return chunk_ids

    def _embed(self, chunks: List[Chunk]) -> Iterable[Tuple[Chunk, np.ndarray]]:
        """Yield (chunk, vector) in order; stops at the first provider failure"""
        workers = self.settings.max_workers
        if self.provider.supports_concurrency and workers > 1 and len(chunks) > 1:
            with ThreadPoolExecutor(max_workers=min(workers, len(chunks))) as executor:
                yield from zip(chunks, executor.map(self.provider.embed, [c.text for c in chunks]))
        else:
            for chunk in chunks:
                yield chunk, self.provider.embed(chunk.text)

    # ------------------------------------------------------------------ video

    def encode(self, output_path, preflight: Optional[bool] = None) -> EncodeResult:
        """Write the whole memory to a QR video plus its .emb sidecar"""
        preflight = self.settings.preflight if preflight is None else preflight
        with self._lock:
            return self.serializer.encode(
                self.chunk_index,
                self.vector_store,
                output_path,
                provider_name=self.provider.name,
                preflight=preflight,
            )

    def decode(self, input_path, sidecar_path=None) -> DecodeResult:
        """Replace the memory with the contents of a video and its sidecar"""
        with self._lock:
            result = self.deserializer.decode(input_path, sidecar_path, chunk_index=self.chunk_index)
            self.vector_store = result.vector_store

            if result.provider_name and result.provider_name != self.provider.name:
                logger.warning(f"Vectors were made by {result.provider_name} but queries will use "
                               f"{self.provider.name}; search scores may be meaningless")
            return result

    # ------------------------------------------------------------------ search

    def search(self, query: str, limit: int = 10,
               predicate: Optional[MetadataPredicate] = None) -> List[SearchResult]:
        """
        Rank stored chunks against a query

        Args:
            query: Query text
            limit: Maximum number of results
            predicate: Optional filter over chunk metadata

        Returns:
            Results ordered by descending cosine similarity
        """
        if limit <= 0:
            return []

        start_time = time.time()
        with self._lock:
            self.initialize()
            query_vector = self.provider.embed(query)

            if self.vector_store.dimension is not None and len(query_vector) != self.vector_store.dimension:
                logger.warning(f"Query dimension {len(query_vector)} differs from stored dimension "
                               f"{self.vector_store.dimension}; every chunk will score 0")

            results = rank(query_vector, self.chunk_index, self.vector_store, limit, predicate)

        elapsed = time.time() - start_time
        logger.info(f"Search completed in {elapsed:.3f}s for query: '{query[:50]}'")
        return results

    def get_chunk(self, chunk_id: str) -> Optional[Chunk]:
        with self._lock:
            return self.chunk_index.get(chunk_id)

    def get_embedding(self, chunk_id: str) -> Optional[np.ndarray]:
        with self._lock:
            return self.vector_store.get(chunk_id)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            searchable = sum(1 for chunk_id in self.chunk_index.ids() if chunk_id in self.vector_store)
            return {
                "total_chunks": len(self.chunk_index),
                "total_vectors": len(self.vector_store),
                "searchable_chunks": searchable,
                "embedding_dim": self.vector_store.dimension,
                "provider": self.provider.name,
                "codec": self.container.codec_name,
            }
