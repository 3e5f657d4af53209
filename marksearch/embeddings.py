"""
Embedding providers for marksearch.

A provider turns a string into a fixed-length, L2-normalized vector. The
default backend is a sentence-transformers model (all-MiniLM-L6-v2, mean
pooling, 384 dimensions). The provider object owns the model handle: it is
built on first use, reused for every later call, and never torn down.
"""

import asyncio
import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from .constants import (
    DEFAULT_MODEL_NAME,
    DEFAULT_DEVICE,
    DEFAULT_EMBEDDING_TIMEOUT,
    MAX_EMBEDDING_CHARS,
)
from .errors import EmbeddingError
from .utils import call_with_retry

logger = logging.getLogger(__name__)

# Try to import sentence-transformers
try:
    from sentence_transformers import SentenceTransformer
    SENTENCE_TRANSFORMERS_AVAILABLE = True
except ImportError:
    SentenceTransformer = None
    SENTENCE_TRANSFORMERS_AVAILABLE = False


def truncate_text(text: str, max_chars: int = MAX_EMBEDDING_CHARS) -> str:
    """
    Cut text to a character budget before embedding.

    This counts characters, not tokens, so it only approximates the model's
    token limit. The model truncates to its own max sequence length as well.
    """
    if max_chars is None or len(text) <= max_chars:
        return text
    logger.debug(f"Truncating embedding input from {len(text)} to {max_chars} characters")
    return text[:max_chars]


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers."""

    @property
    @abstractmethod
    def dimension(self) -> Optional[int]:
        """Output vector length, or None until it is known."""
        ...

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """
        Generate a unit-length embedding for a single text.

        Raises:
            EmbeddingError: If the backend fails.
        """
        ...


class SentenceTransformerProvider(EmbeddingProvider):
    """
    Embedding provider backed by a lazily loaded SentenceTransformer.

    The model is constructed at most once per provider, behind a lock, the
    first time ``embed`` is awaited. Callers share one provider for the
    lifetime of the process.
    """

    def __init__(self, model_name: str = DEFAULT_MODEL_NAME,
                 device: str = DEFAULT_DEVICE,
                 max_chars: int = MAX_EMBEDDING_CHARS,
                 timeout: Optional[float] = DEFAULT_EMBEDDING_TIMEOUT):
        """
        Args:
            model_name: Name of the sentence-transformer model to use
            device: Device to run model on ('cpu', 'cuda', etc.)
            max_chars: Character budget applied before encoding
            timeout: Deadline in seconds for each embedding call, None for none
        """
        self.model_name = model_name
        self.device = device
        self.max_chars = max_chars
        self.timeout = timeout

        self._model: Optional[Any] = None
        self._model_load_error: Optional[Exception] = None
        self._dimension: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    @property
    def is_loaded(self) -> bool:
        """Whether the model handle has been constructed."""
        return self._model is not None

    def _ensure_model_loaded(self) -> Any:
        """Load the model once and cache it."""
        if self._model is not None:
            return self._model

        with self._lock:
            if self._model is not None:
                return self._model
            if self._model_load_error is not None:
                raise EmbeddingError(
                    f"Embedding model '{self.model_name}' is unavailable"
                ) from self._model_load_error
            if not SENTENCE_TRANSFORMERS_AVAILABLE:
                self._model_load_error = RuntimeError("sentence-transformers is not installed")
                raise EmbeddingError(
                    "sentence-transformers is required for embeddings. "
                    "Install with: pip install sentence-transformers"
                )

            try:
                model = SentenceTransformer(self.model_name, device=self.device)
            except Exception as e:
                self._model_load_error = e
                logger.error(f"Failed to load model {self.model_name}: {e}")
                raise EmbeddingError(f"Failed to load model {self.model_name}: {e}") from e

            get_dimension = getattr(model, "get_sentence_embedding_dimension", None)
            reported = get_dimension() if callable(get_dimension) else None
            if isinstance(reported, int) and reported > 0:
                self._dimension = reported
            self._model = model
            logger.info(f"Loaded sentence transformer model: {self.model_name}")
            return model

    def _encode(self, text: str) -> List[float]:
        """Encode one text synchronously; runs in a worker thread."""
        model = self._ensure_model_loaded()
        encoded = model.encode(
            [text],
            convert_to_numpy=True,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        return [float(value) for value in encoded[0]]

    def _check_vector(self, vector: List[float]) -> List[float]:
        if not vector:
            raise EmbeddingError("Embedding model returned an empty vector")
        if not all(math.isfinite(value) for value in vector):
            raise EmbeddingError("Embedding model returned non-finite values")
        if self._dimension is None:
            self._dimension = len(vector)
        elif len(vector) != self._dimension:
            raise EmbeddingError(
                f"Embedding dimension changed from {self._dimension} to {len(vector)}"
            )
        return vector

    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding for a single text.

        Args:
            text: Text to embed; cut to ``max_chars`` characters first

        Returns:
            Unit-length embedding as a list of floats

        Raises:
            EmbeddingError: If loading, encoding, or the deadline fails
        """
        truncated = truncate_text(text, self.max_chars)
        try:
            vector = await call_with_retry(
                lambda: asyncio.to_thread(self._encode, truncated),
                timeout=self.timeout,
                description=f"Embedding with {self.model_name}",
            )
        except EmbeddingError:
            raise
        except asyncio.TimeoutError as e:
            raise EmbeddingError(f"Embedding timed out after {self.timeout}s") from e
        except Exception as e:
            logger.error(f"Error generating embedding: {e}")
            raise EmbeddingError(f"Error generating embedding: {e}") from e

        return self._check_vector(vector)
