"""
Pytest fixtures for ingestion tests.

Use these to test the crawl, chunking and storage flow without Docker or live APIs:
GitHub is served through httpx.MockTransport and Qdrant runs in local in-memory mode.
"""
import sys
from pathlib import Path

import pytest

# Ensure repo_ingest is importable from repo root
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from qdrant_client import QdrantClient

from repo_ingest.core.config import IngestionConfig
from repo_ingest.services.vector_client import QdrantVectorClient
from tests.unit.fakes import FakeEmbeddingService


@pytest.fixture
def memory_vector_client():
    """QdrantVectorClient backed by an in-memory Qdrant (no server)."""
    return QdrantVectorClient(client=QdrantClient(":memory:"))


@pytest.fixture
def fake_embedding_service():
    """EmbeddingService stand-in returning 384-dim unit vectors."""
    return FakeEmbeddingService()


@pytest.fixture
def ingestion_config():
    return IngestionConfig(embedding_backend="remote")
