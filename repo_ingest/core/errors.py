"""Exceptions raised by the ingestion pipeline."""


class IngestionError(Exception):
    """Base class for run-level ingestion failures."""


class EmbeddingError(IngestionError):
    """Embedding generation failed for a whole batch."""


class StorageError(IngestionError):
    """Vector store unreachable or no batch could be stored."""
