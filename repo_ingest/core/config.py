"""
Ingestion Pipeline Configuration

Configuration dataclass and constants for the repository ingestion system.
Single responsibility: configuration only.

Overrides can be loaded from config/ingestion.yaml (or INGESTION_CONFIG env var).
"""

import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


# ===== FILTER CONSTANTS =====
BINARY_EXTENSIONS = frozenset({
    '.png', '.jpg', '.jpeg', '.gif', '.svg', '.ico', '.pdf',
    '.zip', '.tar', '.gz', '.exe', '.dll', '.so', '.dylib', '.bin', '.dat',
})

CODE_EXTENSIONS = frozenset({
    '.js', '.ts', '.jsx', '.tsx', '.py', '.java', '.cpp', '.c', '.cs',
    '.php', '.rb', '.go', '.rs', '.swift', '.kt', '.scala',
    '.html', '.css', '.scss', '.sass', '.less', '.vue', '.svelte',
    '.json', '.xml', '.yaml', '.yml', '.md', '.txt', '.sql', '.sh', '.bash',
})

SKIP_DIRS = frozenset({
    'node_modules', '.git', 'dist', 'build', '.next', 'coverage',
})

ALWAYS_INCLUDE_NAMES = frozenset({'README.md'})

MAX_FILE_BYTES = 1024 * 1024  # 1 MiB, from listing metadata
MAX_CONTENT_CHARS = 1_000_000  # after download


@dataclass
class IngestionConfig:
    """Configuration for the ingestion pipeline."""

    # GitHub API
    github_api_url: str = "https://api.github.com"
    github_user_agent: str = "repo-ingest"
    github_timeout: float = 30.0

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 200
    max_content_chars: int = MAX_CONTENT_CHARS

    # Embedding model (sentence-transformers/all-MiniLM-L6-v2, mean pooling)
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_size: int = 384
    embedding_timeout: int = 60
    embedding_max_retries: int = 1  # 1 = single attempt
    embedding_backend: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_BACKEND", "remote").lower()
    )

    # Vector store
    distance: str = "cosine"
    batch_size: int = 5  # chunks per embed + upsert call
    qdrant_timeout: int = 120

    def __post_init__(self):
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")


# ===== YAML OVERRIDES =====

def _resolve_config_path(config_path: Optional[Path] = None) -> Path:
    """
    Resolve the configuration file path.

    Priority:
    1. Explicit config_path parameter
    2. INGESTION_CONFIG environment variable
    3. Default: config/ingestion.yaml (relative to project root)
    """
    if config_path:
        return Path(config_path)

    env_path = os.getenv('INGESTION_CONFIG')
    if env_path:
        return Path(env_path)

    project_root = Path(__file__).parent.parent.parent
    return project_root / 'config' / 'ingestion.yaml'


def load_ingestion_config(config_path: Optional[Path] = None) -> IngestionConfig:
    """
    Build an IngestionConfig from defaults plus YAML overrides.

    Args:
        config_path: Optional explicit path to a YAML file

    Returns:
        IngestionConfig instance

    Raises:
        ValueError: If the file contains unknown keys or is not a mapping
    """
    path = _resolve_config_path(config_path)
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return IngestionConfig()

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    overrides: Dict[str, Any] = (data['ingestion'] or {}) if 'ingestion' in data else data
    if not isinstance(overrides, dict):
        raise ValueError(f"'ingestion' section in {path} must be a mapping")

    valid_keys = {f.name for f in fields(IngestionConfig)}
    unknown = sorted(set(overrides) - valid_keys)
    if unknown:
        raise ValueError(
            f"Unknown configuration keys in {path}: {', '.join(unknown)}. "
            f"Valid keys: {', '.join(sorted(valid_keys))}"
        )

    logger.info(f"📋 Loaded {len(overrides)} config override(s) from {path}")
    return IngestionConfig(**overrides)
