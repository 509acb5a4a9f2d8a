"""
Core Ingestion Pipeline Components

Main orchestration and processing logic for the ingestion system.
"""

from .pipeline import IngestionPipeline
from .config import IngestionConfig, load_ingestion_config
from .models import (
    RepositoryCoordinate,
    FileEntry,
    CodeChunk,
    IngestionOutcome,
    IngestionStage,
)
from .errors import IngestionError, EmbeddingError, StorageError
from .vector_backend import create_vector_backend, VectorBackend, VectorPoint
from .embedding_service import EmbeddingService
from .storage_manager import StorageManager
from .batch_processor import BatchProcessor
from .file_processor import FileProcessor

__all__ = [
    'IngestionPipeline',
    'IngestionConfig',
    'load_ingestion_config',
    'RepositoryCoordinate',
    'FileEntry',
    'CodeChunk',
    'IngestionOutcome',
    'IngestionStage',
    'IngestionError',
    'EmbeddingError',
    'StorageError',
    'create_vector_backend',
    'VectorBackend',
    'VectorPoint',
    'EmbeddingService',
    'StorageManager',
    'BatchProcessor',
    'FileProcessor',
]
