"""Embedding service and vector helpers.

The service wraps a local sentence-transformers model; the helpers parse
stored embeddings and compute cosine similarity for the retrievers and the
similarity graph.
"""

import asyncio
import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

import numpy as np

from booksearch.config import settings

if TYPE_CHECKING:
    from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)

# Shared thread pool for async operations
_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """Get shared thread pool executor."""
    global _executor
    with _executor_lock:
        if _executor is None:
            max_workers = max(1, settings.embedding_max_workers)
            _executor = ThreadPoolExecutor(max_workers=max_workers)
            logger.info(f"Created thread pool with {max_workers} workers")
        return _executor


class EmbeddingService:
    """Service for generating text embeddings using local models.

    Thread-safe singleton that loads the model once and reuses it.
    """

    _instance: "EmbeddingService | None" = None
    _instance_lock = threading.Lock()

    def __new__(cls, model_name: str | None = None) -> "EmbeddingService":
        """Ensure only one instance exists (singleton pattern)."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self, model_name: str | None = None) -> None:
        # Skip re-initialization if already done
        if getattr(self, "_initialized", False):
            return

        self.model_name = model_name or settings.embedding_model
        self._model: "SentenceTransformer | None" = None
        self._model_lock = threading.Lock()
        self._initialized = True

    def load_model(self) -> None:
        """Explicitly load the embedding model. Thread-safe."""
        with self._model_lock:
            if self._model is not None:
                return

            from sentence_transformers import SentenceTransformer

            logger.info(f"Loading embedding model: {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
            logger.info(
                f"Embedding model loaded. "
                f"Dimensions: {self._model.get_sentence_embedding_dimension()}"
            )

    def _get_model(self) -> "SentenceTransformer":
        """Get the embedding model, loading it if necessary."""
        if self._model is None:
            self.load_model()
        return self._model

    @property
    def dimensions(self) -> int:
        """Get embedding dimensions."""
        return self._get_model().get_sentence_embedding_dimension()

    def embed_sync(self, text: str) -> list[float]:
        """Generate embedding for a single text (synchronous)."""
        model = self._get_model()
        embedding = model.encode(text, convert_to_numpy=True)
        return embedding.tolist()

    def embed_batch_sync(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts (synchronous)."""
        if not texts:
            return []
        model = self._get_model()

        # Some models fail on empty input
        texts_cleaned = [t if t.strip() else " " for t in texts]
        embeddings = model.encode(
            texts_cleaned,
            convert_to_numpy=True,
            batch_size=settings.embedding_batch_size,
            show_progress_bar=len(texts_cleaned) > 100,
        )
        return embeddings.tolist()

    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text (async)."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(get_executor(), self.embed_sync, text)

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts (async)."""
        if not texts:
            return []
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(get_executor(), self.embed_batch_sync, list(texts))


def get_embedding_service() -> EmbeddingService:
    """Get the global embedding service (singleton)."""
    return EmbeddingService()


def parse_vector(raw: Any) -> np.ndarray | None:
    """
    Parse a stored embedding into a 1-D float64 array.

    Accepts a sequence of numbers, a numpy array, or the text form
    ``"[0.01, -0.2, ...]"``. Returns None for anything absent, empty,
    unparsable, multi-dimensional or non-finite; never raises.
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        clean = raw.strip().strip("[]").strip()
        if not clean:
            return None
        try:
            values = [float(part) for part in clean.split(",")]
        except ValueError:
            return None
        vector = np.array(values, dtype=np.float64)
    else:
        try:
            vector = np.asarray(raw, dtype=np.float64)
        except (TypeError, ValueError):
            return None

    if vector.ndim != 1 or vector.size == 0:
        return None
    if not np.all(np.isfinite(vector)):
        return None
    return vector


def scale_vector(vector: np.ndarray) -> np.ndarray:
    """Divide by the largest absolute component; cosine is scale invariant.

    Keeps the dot product and norm of large finite vectors from overflowing.
    """
    peak = float(np.max(np.abs(vector))) if vector.size else 0.0
    if peak == 0.0:
        return vector
    return vector / peak


def vector_norm(vector: np.ndarray) -> float:
    return float(np.linalg.norm(vector))


def cosine_from_norms(a: np.ndarray, b: np.ndarray, norm_a: float, norm_b: float) -> float:
    """Cosine similarity of scaled vectors with precomputed norms.

    Returns 0.0 when either norm is zero.
    """
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    Mismatched dimensions and zero vectors give 0.0.
    """
    a = np.asarray(vec1, dtype=np.float64)
    b = np.asarray(vec2, dtype=np.float64)
    if a.shape != b.shape:
        return 0.0
    a = scale_vector(a)
    b = scale_vector(b)
    return cosine_from_norms(a, b, vector_norm(a), vector_norm(b))


def cosine_similarity_batch(
    query: Sequence[float],
    vectors: Sequence[Sequence[float]],
) -> list[float]:
    """Compute cosine similarity between query and multiple same-sized vectors."""
    if len(vectors) == 0:
        return []
    q = scale_vector(np.asarray(query, dtype=np.float64))
    v = np.asarray(vectors, dtype=np.float64)
    peaks = np.max(np.abs(v), axis=1, keepdims=True)
    v = v / np.where(peaks == 0.0, 1.0, peaks)
    q_norm = np.linalg.norm(q)
    v_norms = np.linalg.norm(v, axis=1)
    if q_norm == 0.0:
        return [0.0] * len(v)
    dots = v @ q
    safe_norms = np.where(v_norms == 0.0, 1.0, v_norms)
    similarities = np.where(v_norms == 0.0, 0.0, dots / (safe_norms * q_norm))
    return similarities.tolist()
