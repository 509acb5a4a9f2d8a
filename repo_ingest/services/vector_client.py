"""
Qdrant Vector Database Client

Handles the connection to Qdrant and the collection/point operations used by
the ingestion pipeline. Errors propagate to the caller; the StorageManager
decides what is fatal.
"""

import os
import uuid
import logging
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from ..core.vector_backend import VectorPoint

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DISTANCES = {
    'cosine': Distance.COSINE,
    'dot': Distance.DOT,
    'euclid': Distance.EUCLID,
}


class QdrantVectorClient:
    """Qdrant client for per-repository collections."""

    def __init__(self, client: Optional[QdrantClient] = None, timeout: int = 120):
        """
        Initialize Qdrant client with credentials from .env

        Args:
            client: Preconfigured QdrantClient (e.g. QdrantClient(":memory:") in tests)
            timeout: Request timeout in seconds
        """
        if client is not None:
            self.client = client
            return

        self.url = os.getenv('QDRANT_URL')
        self.api_key = os.getenv('QDRANT_API_KEY')

        if not self.url:
            logger.warning("⚠️ QDRANT_URL not set, using default localhost connection")
            self.url = "http://localhost:6333"

        logger.info(f"🔗 Connecting to Qdrant at {self.url[:50]}...")
        self.client = QdrantClient(url=self.url, api_key=self.api_key, timeout=timeout)
        logger.info("✅ Qdrant client initialized")

    def check_connection(self) -> None:
        self.client.get_collections()

    def collection_exists(self, collection_name: str) -> bool:
        return self.client.collection_exists(collection_name)

    def create_collection(self, collection_name: str, vector_size: int, distance: str = "cosine") -> None:
        if distance not in DISTANCES:
            raise ValueError(f"Unsupported distance '{distance}'. Valid: {', '.join(DISTANCES)}")

        logger.info(f"📦 Creating collection: {collection_name}")
        self.client.create_collection(
            collection_name=collection_name,
            vectors_config=VectorParams(size=vector_size, distance=DISTANCES[distance])
        )
        logger.info(f"✅ Collection '{collection_name}' created with {vector_size}D vectors")

    def delete_collection(self, collection_name: str) -> bool:
        if not self.client.collection_exists(collection_name):
            return False
        logger.info(f"🗑️ Deleting collection: {collection_name}")
        self.client.delete_collection(collection_name)
        return True

    def upsert_points(self, collection_name: str, points: List[VectorPoint], wait: bool = True) -> None:
        structs = []
        for point in points:
            point_id = point.id
            try:
                point_id = str(uuid.UUID(point_id))
            except ValueError:
                # Qdrant only accepts unsigned ints or UUIDs
                point_id = str(uuid.uuid5(uuid.NAMESPACE_URL, point_id))
            structs.append(PointStruct(id=point_id, vector=point.vector, payload=point.payload))

        self.client.upsert(collection_name=collection_name, points=structs, wait=wait)
        logger.debug(f"✅ Upserted {len(structs)} vectors to '{collection_name}'")

    def get_collection_stats(self, collection_name: str) -> Dict[str, Any]:
        """Get statistics about a collection."""
        info = self.client.get_collection(collection_name)
        vectors = info.config.params.vectors
        return {
            'status': info.status,
            'points_count': info.points_count,
            'config': {
                'vector_size': vectors.size,
                'distance_metric': vectors.distance.value
            }
        }
