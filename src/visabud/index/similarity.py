"""Cosine similarity that never produces NaN."""

from typing import Sequence

import numpy as np


def l2_normalize(vector: Sequence[float] | np.ndarray) -> np.ndarray | None:
    """Unit-length copy of the vector, or None for a zero or non-finite one."""
    array = np.asarray(vector, dtype=np.float64).reshape(-1)
    if array.size == 0 or not np.all(np.isfinite(array)):
        return None
    norm = float(np.linalg.norm(array))
    if norm == 0.0:
        return None
    return array / norm


def cosine_similarity(
    a: Sequence[float] | np.ndarray,
    b: Sequence[float] | np.ndarray,
) -> float:
    """Cosine similarity in [-1, 1].

    Zero vectors and mismatched dimensions score 0.
    """
    left = l2_normalize(a)
    right = l2_normalize(b)
    if left is None or right is None or left.shape != right.shape:
        return 0.0
    return float(np.clip(np.dot(left, right), -1.0, 1.0))
