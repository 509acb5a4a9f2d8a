"""
Batch Processor for Sequential Streaming

Embeds and stores chunks in fixed-size batches, one batch at a time.
A failing batch is logged and dropped; the run continues with the next one.
Single responsibility: batch processing only.
"""

import logging
from typing import List

from .models import BatchResult, BatchRunResult, CodeChunk

logger = logging.getLogger(__name__)


class BatchProcessor:
    """
    Processes chunks in sequential batches.

    Responsibilities:
    - Split chunks into fixed-size batches
    - Embed each batch, then upsert it in a single call
    - Record a typed result per batch instead of raising
    """

    def __init__(self, embedding_service, storage_manager, batch_size: int = 5):
        """
        Initialize batch processor.

        Args:
            embedding_service: EmbeddingService instance
            storage_manager: StorageManager instance
            batch_size: Number of chunks per batch
        """
        self.embedding_service = embedding_service
        self.storage_manager = storage_manager
        self.batch_size = batch_size

    def warmup(self) -> None:
        """Load the embedding model before the first batch (raises EmbeddingError)."""
        self.embedding_service.warmup()

    def stream_chunks_to_storage(
        self,
        chunks: List[CodeChunk],
        collection_name: str,
        run_id: str
    ) -> BatchRunResult:
        """
        Embed and store all chunks batch by batch.

        Args:
            chunks: Chunks to store
            collection_name: Target collection
            run_id: Identifier of the current ingestion run

        Returns:
            BatchRunResult with one BatchResult per batch
        """
        run = BatchRunResult()
        if not chunks:
            return run

        total_batches = (len(chunks) + self.batch_size - 1) // self.batch_size

        for i in range(0, len(chunks), self.batch_size):
            batch_chunks = chunks[i:i + self.batch_size]
            batch_id = i // self.batch_size + 1
            result = self._process_batch(batch_chunks, collection_name, run_id, batch_id, total_batches)
            run.batches.append(result)

        if run.batches_failed:
            failed_chunks = sum(b.size for b in run.batches if not b.success)
            logger.error(
                f"❌ {run.batches_failed}/{total_batches} batches ({failed_chunks} chunks) failed"
            )

        logger.info(
            f"✅ Streaming complete: {run.stored}/{len(chunks)} chunks stored in '{collection_name}'"
        )
        return run

    def _process_batch(
        self,
        batch_chunks: List[CodeChunk],
        collection_name: str,
        run_id: str,
        batch_id: int,
        total_batches: int
    ) -> BatchResult:
        """Embed then upsert one batch; any exception marks the batch as failed."""
        logger.info(f"🔄 Batch {batch_id}/{total_batches} ({len(batch_chunks)} chunks) → {collection_name}")

        try:
            texts = [chunk.content for chunk in batch_chunks]
            embeddings = self.embedding_service.embed(texts)

            stored = self.storage_manager.upsert_batch(
                collection_name,
                batch_chunks,
                embeddings,
                run_id
            )
        except Exception as e:
            logger.error(f"❌ Error processing batch {batch_id}/{total_batches}: {type(e).__name__}: {e}")
            return BatchResult(batch_id=batch_id, size=len(batch_chunks), error=f"{type(e).__name__}: {e}")

        logger.info(f"💾 Batch {batch_id}/{total_batches}: {stored} vectors stored")
        return BatchResult(batch_id=batch_id, size=len(batch_chunks), stored=stored)
