"""
Storage Manager for Vector Database Operations

Owns the lifecycle of a repository's collection: reset, batched upserts,
and compensating deletion when the storing phase fails.
Single responsibility: storage operations only.
"""

import hashlib
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List

from .errors import StorageError
from .models import BatchRunResult, CodeChunk
from .vector_backend import VectorBackend, VectorPoint

logger = logging.getLogger(__name__)

# collection name -> [lock, number of runs holding or waiting for it]
_collection_locks: Dict[str, list] = {}
_collection_locks_guard = threading.Lock()


@contextmanager
def collection_lock(collection_name: str) -> Iterator[None]:
    """
    Serialize storing phases that target the same collection within this process.

    The entry for a collection is dropped once no run holds or waits for it,
    so a long-lived process does not keep one lock per repository ever seen.
    Other processes writing the same collection are not covered.
    """
    with _collection_locks_guard:
        entry = _collection_locks.setdefault(collection_name, [threading.Lock(), 0])
        entry[1] += 1
    lock = entry[0]

    try:
        if lock.locked():
            logger.info(f"⏳ Waiting for another run on collection '{collection_name}'")
        with lock:
            yield
    finally:
        with _collection_locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _collection_locks[collection_name]


def make_point_id(chunk: CodeChunk) -> str:
    """
    Stable record identifier for a chunk.

    sha256 of `owner/repository:file_path:chunk_index`. Unique within a run
    because (file_path, chunk_index) is unique per repository; identical
    across runs, so re-upserting the same chunk overwrites instead of growing.
    """
    key = f"{chunk.owner}/{chunk.repository}:{chunk.file_path}:{chunk.chunk_index}"
    return hashlib.sha256(key.encode('utf-8')).hexdigest()


class StorageManager:
    """
    Manages vector storage for one collection per repository.

    Responsibilities:
    - Reset collections (delete if present, then create)
    - Build and upsert points for a batch
    - Drive the batched storing phase and compensate on failure
    """

    def __init__(self, vector_client: VectorBackend, embedding_size: int = 384, distance: str = "cosine"):
        """
        Initialize storage manager.

        Args:
            vector_client: Vector backend instance
            embedding_size: Expected embedding dimension
            distance: Similarity metric for new collections
        """
        self.vector_client = vector_client
        self.embedding_size = embedding_size
        self.distance = distance
        logger.info(f"💾 Storage manager initialized (dimension: {embedding_size}, distance: {distance})")

    def reset_collection(self, collection_name: str) -> None:
        """
        Leave exactly one empty collection with the configured size and metric.

        Safe to call repeatedly.
        """
        if self.vector_client.delete_collection(collection_name):
            logger.info(f"🗑️ Removed previous collection: {collection_name}")
        self.vector_client.create_collection(collection_name, self.embedding_size, self.distance)

    def delete_collection(self, collection_name: str) -> bool:
        return self.vector_client.delete_collection(collection_name)

    def build_points(
        self,
        chunks: List[CodeChunk],
        embeddings: List[List[float]],
        run_id: str
    ) -> List[VectorPoint]:
        """Pair chunks with their embeddings as VectorPoints."""
        if len(chunks) != len(embeddings):
            raise ValueError(f"Mismatch: {len(chunks)} chunks vs {len(embeddings)} embeddings")

        processed_at = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')

        points = []
        for chunk, embedding in zip(chunks, embeddings):
            if len(embedding) != self.embedding_size:
                raise ValueError(
                    f"Vector dimension mismatch: expected {self.embedding_size}, got {len(embedding)}"
                )
            payload = chunk.to_payload()
            payload['processed_at'] = processed_at
            payload['run_id'] = run_id
            points.append(VectorPoint(id=make_point_id(chunk), vector=embedding, payload=payload))
        return points

    def upsert_batch(
        self,
        collection_name: str,
        chunks: List[CodeChunk],
        embeddings: List[List[float]],
        run_id: str
    ) -> int:
        """
        Upsert one batch and wait until the store has applied it.

        Returns:
            Number of vectors stored

        Raises:
            ValueError: On chunk/embedding mismatch
            Exception: Whatever the backend raises
        """
        points = self.build_points(chunks, embeddings, run_id)
        self.vector_client.upsert_points(collection_name, points, wait=True)
        return len(points)

    def store_chunks(
        self,
        collection_name: str,
        chunks: List[CodeChunk],
        batch_processor,
        run_id: str
    ) -> BatchRunResult:
        """
        Reset the collection and stream all chunks into it.

        On any failure the freshly created collection is deleted before the
        error propagates, so a missing collection signals a failed run.

        Args:
            collection_name: Target collection
            chunks: Chunks to embed and store
            batch_processor: BatchProcessor bound to this storage manager
            run_id: Identifier of the current ingestion run

        Returns:
            BatchRunResult with at least one successful batch

        Raises:
            StorageError: Store unreachable or no batch stored
            EmbeddingError: Model unavailable
        """
        try:
            try:
                self.vector_client.check_connection()
            except Exception as e:
                raise StorageError(f"Failed to connect to vector store: {e}") from e
            logger.info("✅ Vector store connection successful")

            batch_processor.warmup()

            try:
                self.reset_collection(collection_name)
            except Exception as e:
                raise StorageError(f"Failed to reset collection '{collection_name}': {e}") from e

            run = batch_processor.stream_chunks_to_storage(chunks, collection_name, run_id)

            if run.batches_succeeded == 0:
                last_error = run.batches[-1].error if run.batches else "no batches"
                raise StorageError(
                    f"all {len(run.batches)} batches failed to store (last error: {last_error})"
                )
            return run

        except Exception as e:
            logger.error(f"❌ Error embedding and storing chunks: {e}")
            self._compensate(collection_name)
            raise

    def _compensate(self, collection_name: str) -> None:
        try:
            if self.vector_client.delete_collection(collection_name):
                logger.info(f"🗑️ Cleaned up collection: {collection_name}")
        except Exception as e:
            logger.error(f"❌ Failed to delete collection '{collection_name}': {e}")
