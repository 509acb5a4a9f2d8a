"""
Embedding Service

Turns batches of chunk text into fixed-dimension, L2-normalized vectors.
Single responsibility: embedding generation only.

Backends:
- remote: OpenAI-compatible /embeddings endpoint (Hugging Face Text
  Embeddings Inference, HF router, ...) through the openai SDK
- local: sentence-transformers model loaded in-process

The model handle is created once per service instance, on first use, under
a lock. Build one service at startup and pass it to every pipeline so
concurrent runs share the same handle.
"""

import logging
import math
import os
import threading
import time
from typing import Any, List, Optional

import numpy as np
from dotenv import load_dotenv

from .errors import EmbeddingError

load_dotenv()

logger = logging.getLogger(__name__)

BACKEND_REMOTE = "remote"
BACKEND_LOCAL = "local"


class EmbeddingService:
    """
    Service for generating sentence embeddings.

    Responsibilities:
    - Lazily initialize the model handle exactly once
    - Generate embeddings index-aligned with the input
    - L2-normalize vectors for cosine similarity
    - Validate embedding quality (count, dimension, finite values)
    """

    def __init__(
        self,
        model: str = "sentence-transformers/all-MiniLM-L6-v2",
        embedding_size: int = 384,
        backend: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = 60,
        max_retries: int = 1,
    ):
        """
        Initialize embedding service. Nothing is loaded until first use.

        Args:
            model: Embedding model name
            embedding_size: Expected embedding dimension (all-MiniLM-L6-v2 = 384)
            backend: 'remote' or 'local' (or set EMBEDDING_BACKEND env var)
            base_url: OpenAI-compatible endpoint (or set EMBEDDING_BASE_URL env var)
            timeout: Request timeout in seconds
            max_retries: Attempts per batch for the remote backend
        """
        self.model = model
        self.embedding_size = embedding_size
        self.backend = (backend or os.getenv("EMBEDDING_BACKEND", BACKEND_REMOTE)).lower()
        self.base_url = base_url or os.getenv("EMBEDDING_BASE_URL", "http://localhost:8080/v1")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)

        if self.backend not in (BACKEND_REMOTE, BACKEND_LOCAL):
            raise ValueError(
                f"Unknown embedding backend: '{self.backend}'. "
                f"Must be '{BACKEND_REMOTE}' or '{BACKEND_LOCAL}'."
            )

        self._handle: Any = None
        self._init_lock = threading.Lock()

        logger.info(f"🔗 Embedding service configured")
        logger.info(f"   - Backend: {self.backend}")
        logger.info(f"   - Model: {self.model}")
        logger.info(f"   - Embedding size: {embedding_size}D")

    @property
    def is_initialized(self) -> bool:
        return self._handle is not None

    def warmup(self) -> None:
        """
        Initialize the model handle now instead of on the first batch.

        Raises:
            EmbeddingError: If the model cannot be loaded
        """
        self._get_handle()

    def _get_handle(self) -> Any:
        if self._handle is None:
            with self._init_lock:
                if self._handle is None:
                    self._handle = self._load_handle()
        return self._handle

    def _load_handle(self) -> Any:
        start_time = time.time()
        try:
            if self.backend == BACKEND_LOCAL:
                from sentence_transformers import SentenceTransformer

                handle = SentenceTransformer(self.model)
            else:
                from openai import OpenAI

                api_key = os.getenv("EMBEDDING_API_KEY") or os.getenv("HUGGINGFACE_API_KEY")
                if not api_key:
                    logger.warning("⚠️ EMBEDDING_API_KEY not set, sending unauthenticated requests")
                handle = OpenAI(
                    api_key=api_key or "unused",
                    base_url=self.base_url,
                    timeout=self.timeout,
                    max_retries=0,
                )
        except Exception as e:
            raise EmbeddingError(f"embedding model unavailable ({self.model}): {e}") from e

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(f"✅ Embedding model ready: {self.model} ({self.backend}, {elapsed_ms:.1f}ms)")
        return handle

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a batch of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            One vector per input text, in input order

        Raises:
            EmbeddingError: If any text in the batch cannot be embedded
        """
        if not texts:
            return []

        handle = self._get_handle()

        if self.backend == BACKEND_LOCAL:
            raw = self._embed_local(handle, texts)
        else:
            raw = self._embed_remote(handle, texts)

        if len(raw) != len(texts):
            raise EmbeddingError(
                f"embedding count mismatch: expected {len(texts)}, got {len(raw)}"
            )

        embeddings = self.normalize(raw)
        for embedding in embeddings:
            self.validate_embedding(embedding)
        return embeddings

    def _embed_local(self, handle, texts: List[str]) -> List[List[float]]:
        try:
            return handle.encode(texts, convert_to_numpy=True).tolist()
        except Exception as e:
            raise EmbeddingError(f"local embedding failed: {type(e).__name__}: {e}") from e

    def _embed_remote(self, handle, texts: List[str]) -> List[List[float]]:
        for attempt in range(self.max_retries):
            try:
                start_time = time.time()
                response = handle.embeddings.create(
                    input=texts,
                    model=self.model,
                    encoding_format="float"
                )
                elapsed_ms = (time.time() - start_time) * 1000
                logger.debug(f"🔄 Embedded {len(texts)} texts ({elapsed_ms:.1f}ms)")
                return [item.embedding for item in sorted(response.data, key=lambda item: item.index)]

            except Exception as e:
                logger.warning(
                    f"⚠️ Embedding request failed on attempt {attempt + 1}/{self.max_retries}: "
                    f"{type(e).__name__}: {e}"
                )
                if attempt < self.max_retries - 1:
                    wait_time = min(2 ** attempt, 8)
                    time.sleep(wait_time)
                    continue
                raise EmbeddingError(f"remote embedding failed: {type(e).__name__}: {e}") from e

        return []

    @staticmethod
    def normalize(raw: List[List[float]]) -> List[List[float]]:
        """L2-normalize each row; zero vectors are left as-is."""
        try:
            matrix = np.asarray(raw, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"malformed embedding response: {e}") from e
        if matrix.ndim != 2:
            raise EmbeddingError(f"malformed embedding response: expected 2-D array, got {matrix.ndim}-D")
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return (matrix / norms).tolist()

    def validate_embedding(self, embedding: List[float]) -> None:
        """
        Validate embedding quality.

        Raises:
            EmbeddingError: On NaN/infinite values or a dimension mismatch
        """
        if len(embedding) != self.embedding_size:
            raise EmbeddingError(
                f"embedding dimension mismatch: expected {self.embedding_size}, got {len(embedding)}"
            )
        if any(not math.isfinite(v) for v in embedding):
            raise EmbeddingError("embedding contains NaN or infinite values")
