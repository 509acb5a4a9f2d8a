"""
Ingestion Pipeline Orchestrator

Runs one repository through crawl → chunk → embed+store and reports a
single IngestionOutcome. Single responsibility: orchestration only.
"""

import logging
import uuid
from typing import Callable, Optional

from .batch_processor import BatchProcessor
from .config import IngestionConfig
from .embedding_service import EmbeddingService
from .file_processor import FileProcessor
from .models import (
    BatchRunResult,
    ChunkBuildResult,
    CrawlResult,
    IngestionOutcome,
    IngestionStage,
    RepositoryCoordinate,
)
from .storage_manager import StorageManager, collection_lock
from .vector_backend import VectorBackend, create_vector_backend
from ..services.github_client import GitHubRepositoryClient

logger = logging.getLogger(__name__)

MESSAGE_NO_FILES = "no files found to process"
MESSAGE_NO_CHUNKS = "no code chunks generated"


class IngestionPipeline:
    """
    Main orchestrator for repository ingestion.

    Stages run strictly in order and are never retried:
    IDLE → CRAWLING → CHUNKING → EMBEDDING_STORING → SUCCEEDED | FAILED

    The embedding service is injected so one loaded model can be shared by
    every pipeline in the process.
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        embedding_service: Optional[EmbeddingService] = None,
        vector_client: Optional[VectorBackend] = None,
        repository_client_factory: Optional[Callable[[RepositoryCoordinate, str], GitHubRepositoryClient]] = None,
    ):
        """
        Args:
            config: Optional configuration (uses defaults if not provided)
            embedding_service: Shared EmbeddingService (built from config if omitted)
            vector_client: Vector backend (created from VECTOR_BACKEND on first use if omitted)
            repository_client_factory: Builds a repository client for (coordinate, token)
        """
        self.config = config or IngestionConfig()

        self.embedding_service = embedding_service or EmbeddingService(
            model=self.config.embedding_model,
            embedding_size=self.config.embedding_size,
            backend=self.config.embedding_backend,
            timeout=self.config.embedding_timeout,
            max_retries=self.config.embedding_max_retries,
        )
        self.repository_client_factory = repository_client_factory or self._default_repository_client

        # Lazy-load vector client and dependent services
        self._vector_client = vector_client
        self._storage_manager = None
        self._batch_processor = None

    def _default_repository_client(self, coordinate: RepositoryCoordinate, access_token: str) -> GitHubRepositoryClient:
        return GitHubRepositoryClient(
            coordinate,
            access_token,
            api_url=self.config.github_api_url,
            user_agent=self.config.github_user_agent,
            timeout=self.config.github_timeout,
        )

    @property
    def vector_client(self) -> VectorBackend:
        """Lazy-load vector client on first access."""
        if self._vector_client is None:
            self._vector_client = create_vector_backend(timeout=self.config.qdrant_timeout)
        return self._vector_client

    @property
    def storage_manager(self) -> StorageManager:
        """Lazy-load storage manager on first access."""
        if self._storage_manager is None:
            self._storage_manager = StorageManager(
                vector_client=self.vector_client,
                embedding_size=self.config.embedding_size,
                distance=self.config.distance,
            )
        return self._storage_manager

    @property
    def batch_processor(self) -> BatchProcessor:
        """Lazy-load batch processor on first access."""
        if self._batch_processor is None:
            self._batch_processor = BatchProcessor(
                embedding_service=self.embedding_service,
                storage_manager=self.storage_manager,
                batch_size=self.config.batch_size,
            )
        return self._batch_processor

    def process_repository(self, coordinate: RepositoryCoordinate, access_token: str) -> IngestionOutcome:
        """
        Ingest one repository into its collection.

        Never raises: every failure is reported through the outcome.

        Args:
            coordinate: Repository to ingest
            access_token: Bearer token authorizing repository reads

        Returns:
            IngestionOutcome
        """
        run_id = uuid.uuid4().hex
        collection_name = coordinate.collection_name
        stage = IngestionStage.CRAWLING
        crawl = CrawlResult()
        build = ChunkBuildResult()

        logger.info(f"🚀 Starting repository processing for {coordinate.full_name} (run {run_id[:8]})")

        try:
            with self.repository_client_factory(coordinate, access_token) as repository_client:
                crawl = repository_client.crawl()
                logger.info(f"📋 Found {len(crawl.files)} files to process")

                if not crawl.files:
                    return self._failed(MESSAGE_NO_FILES, crawl=crawl)

                stage = IngestionStage.CHUNKING
                file_processor = FileProcessor(repository_client, coordinate, self.config)
                build = file_processor.build_chunks(crawl.files)

            if not build.chunks:
                return self._failed(MESSAGE_NO_CHUNKS, crawl=crawl, build=build)

            stage = IngestionStage.EMBEDDING_STORING
            with collection_lock(collection_name):
                run = self.storage_manager.store_chunks(
                    collection_name,
                    build.chunks,
                    self.batch_processor,
                    run_id
                )

        except Exception as e:
            logger.error(f"❌ Repository processing failed during {stage.value}: {e}")
            return self._failed(f"Processing failed during {stage.value}: {e}", crawl=crawl, build=build)

        outcome = self._succeeded(crawl, build, run)
        self._log_statistics(coordinate, outcome)
        return outcome

    def _failed(
        self,
        message: str,
        crawl: CrawlResult,
        build: Optional[ChunkBuildResult] = None
    ) -> IngestionOutcome:
        build = build or ChunkBuildResult()
        logger.warning(f"⚠️ Ingestion failed: {message}")
        return IngestionOutcome(
            success=False,
            chunks_processed=0,
            message=message,
            stage=IngestionStage.FAILED,
            files_found=len(crawl.files),
            files_skipped=build.files_skipped + build.files_failed,
        )

    def _succeeded(self, crawl: CrawlResult, build: ChunkBuildResult, run: BatchRunResult) -> IngestionOutcome:
        chunk_count = len(build.chunks)
        message = f"Successfully processed {chunk_count} code chunks from {len(crawl.files)} files"

        notes = []
        if run.stored != chunk_count:
            notes.append(f"{run.stored} stored")
        if run.batches_failed:
            notes.append(f"{run.batches_failed} batches failed")
        files_skipped = build.files_skipped + build.files_failed
        if files_skipped:
            notes.append(f"{files_skipped} files skipped")
        if crawl.failed_paths:
            notes.append(f"{len(crawl.failed_paths)} directories unreadable")
        if notes:
            message += f" ({'; '.join(notes)})"

        return IngestionOutcome(
            success=True,
            chunks_processed=chunk_count,
            message=message,
            stage=IngestionStage.SUCCEEDED,
            files_found=len(crawl.files),
            files_skipped=files_skipped,
            chunks_stored=run.stored,
            batches_succeeded=run.batches_succeeded,
            batches_failed=run.batches_failed,
        )

    def _log_statistics(self, coordinate: RepositoryCoordinate, outcome: IngestionOutcome):
        """Log ingestion statistics."""
        logger.info("=" * 60)
        logger.info(f"📊 Ingestion Statistics for {coordinate.full_name}:")
        logger.info(f"  Collection: {coordinate.collection_name}")
        logger.info(f"  Files found: {outcome.files_found}")
        logger.info(f"  Files skipped: {outcome.files_skipped}")
        logger.info(f"  Chunks: {outcome.chunks_processed} ({outcome.chunks_stored} stored)")
        logger.info(f"  Batches: {outcome.batches_succeeded} succeeded, {outcome.batches_failed} failed")
        logger.info("=" * 60)
