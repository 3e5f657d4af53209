"""
Vector similarity for marksearch.
"""
from typing import Sequence, Optional

import numpy as np

from .errors import InvalidVectorError, MismatchedDimensionError


def _as_vector(vec: Optional[Sequence[float]], name: str) -> np.ndarray:
    if vec is None:
        raise InvalidVectorError(f"Vector '{name}' is missing")
    arr = np.asarray(vec, dtype=np.float64)
    if arr.ndim != 1:
        raise InvalidVectorError(f"Vector '{name}' must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        raise InvalidVectorError(f"Vector '{name}' is empty")
    if not np.all(np.isfinite(arr)):
        raise InvalidVectorError(f"Vector '{name}' contains non-finite values")
    return arr


def _rescale(arr: np.ndarray) -> np.ndarray:
    """Divide by the largest absolute component so norms neither underflow nor overflow."""
    peak = np.max(np.abs(arr))
    if peak == 0.0:
        return arr
    return arr / peak


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between two equal-length vectors.

    The formula divides by both magnitudes, so unit vectors and raw vectors
    give the same answer. Each vector is first scaled by its largest
    component, which keeps very small or very large inputs in range.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Similarity in [-1, 1], or 0.0 when either vector has zero magnitude

    Raises:
        InvalidVectorError: If either vector is missing, empty or non-finite
        MismatchedDimensionError: If the vectors differ in length
    """
    vec_a = _as_vector(a, "a")
    vec_b = _as_vector(b, "b")
    if vec_a.shape[0] != vec_b.shape[0]:
        raise MismatchedDimensionError(vec_a.shape[0], vec_b.shape[0])

    vec_a = _rescale(vec_a)
    vec_b = _rescale(vec_b)
    magnitude_a = float(np.linalg.norm(vec_a))
    magnitude_b = float(np.linalg.norm(vec_b))
    if magnitude_a == 0.0 or magnitude_b == 0.0:
        return 0.0

    return float(np.dot(vec_a, vec_b)) / (magnitude_a * magnitude_b)
