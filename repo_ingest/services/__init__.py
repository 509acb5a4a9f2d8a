"""
Ingestion Services

Supporting services for the ingestion pipeline.
"""

from .vector_client import QdrantVectorClient
from .github_client import GitHubRepositoryClient
from .content_filter import ContentFilter

__all__ = [
    'QdrantVectorClient',
    'GitHubRepositoryClient',
    'ContentFilter',
]
