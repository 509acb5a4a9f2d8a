"""
Vector Backend Abstraction

Common point structure and interface for the vector database backend, plus
the factory that builds the configured backend.

Single responsibility: backend abstraction.
"""

import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


# ============================================================================
# Point Structure
# ============================================================================

@dataclass
class VectorPoint:
    """
    Unit persisted to the vector store.
    Maps to PointStruct for Qdrant.
    """
    id: str
    vector: List[float]
    payload: Dict[str, Any]


# ============================================================================
# Vector Backend Protocol
# ============================================================================

class VectorBackend(Protocol):
    """Interface the StorageManager relies on."""

    def check_connection(self) -> None:
        """
        Verify the backend is reachable.

        Raises:
            Exception: Backend-specific connection error
        """
        ...

    def collection_exists(self, collection_name: str) -> bool:
        ...

    def create_collection(self, collection_name: str, vector_size: int, distance: str = "cosine") -> None:
        """
        Create an empty collection.

        Raises:
            Exception: If the collection cannot be created
        """
        ...

    def delete_collection(self, collection_name: str) -> bool:
        """
        Delete a collection.

        Returns:
            True if it existed and was deleted, False if it did not exist
        """
        ...

    def upsert_points(self, collection_name: str, points: List[VectorPoint], wait: bool = True) -> None:
        """
        Insert or update points, returning only once the store applied them when wait=True.

        Raises:
            Exception: If the upsert is rejected or the store is unreachable
        """
        ...

    def get_collection_stats(self, collection_name: str) -> Dict[str, Any]:
        ...


# ============================================================================
# Backend Factory
# ============================================================================

def create_vector_backend(backend_type: Optional[str] = None, timeout: int = 120) -> VectorBackend:
    """
    Factory function to create vector backend based on configuration.

    Args:
        backend_type: Type of backend. If None, reads VECTOR_BACKEND env var.
        timeout: Client request timeout in seconds

    Returns:
        Configured vector backend instance

    Raises:
        ValueError: If backend_type is invalid
    """
    if backend_type is None:
        backend_type = os.getenv('VECTOR_BACKEND', 'qdrant').lower()

    logger.info(f"🔧 Creating vector backend: {backend_type}")

    if backend_type == 'qdrant':
        from ..services.vector_client import QdrantVectorClient
        return QdrantVectorClient(timeout=timeout)

    raise ValueError(
        f"Unknown vector backend type: '{backend_type}'. "
        f"Must be 'qdrant'. Set VECTOR_BACKEND environment variable."
    )
