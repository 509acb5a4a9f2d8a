"""
Repository Ingestion System

Crawls a GitHub repository, chunks its source files, embeds the chunks and
stores them in a per-repository Qdrant collection.
"""

from .core import (
    IngestionPipeline,
    IngestionConfig,
    IngestionOutcome,
    RepositoryCoordinate,
)

__all__ = [
    'IngestionPipeline',
    'IngestionConfig',
    'IngestionOutcome',
    'RepositoryCoordinate',
]
