"""
Cosine similarity used by every scan-based driver.
"""

from typing import Sequence, Union

import numpy as np

from ..core.exceptions import DimensionMismatchError

Vector = Union[Sequence[float], np.ndarray]


def cosine_similarity(a: Vector, b: Vector) -> float:
    """
    Compute cosine similarity between two equal-length vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Similarity in [-1, 1]; 0.0 when either vector has zero norm

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)

    if vec_a.shape != vec_b.shape:
        raise DimensionMismatchError(expected=vec_a.size, actual=vec_b.size)

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        # Zero vector has no direction to compare
        return 0.0

    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))


def to_vector_literal(vector: Vector) -> str:
    """Format a vector as the engine's literal, e.g. '[0.1,0.2,0.3]'."""
    return "[" + ",".join(repr(float(v)) for v in vector) + "]"
