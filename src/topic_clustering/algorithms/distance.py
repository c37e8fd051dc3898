"""
Vector validation and distance primitives.

Cosine distance is the metric used throughout the clustering algorithms.
A zero vector is defined to be at the maximal distance (1) from every vector,
itself included, so it can never be "close" to anything.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from ..exceptions import InvalidInputError

Array2D = np.ndarray
VectorsIn = Union[np.ndarray, Sequence[Sequence[float]]]


def as_matrix(vectors: VectorsIn) -> Array2D:
    """
    Convert input vectors to a float64 matrix of shape (n_samples, n_features).

    Accepts a 2-D ndarray or any sequence of equal-length numeric sequences.
    Empty input yields an array of shape (0, 0).

    Args:
        vectors: Input vectors

    Returns:
        Float64 array of shape (n_samples, n_features)

    Raises:
        InvalidInputError: If rows differ in length, the input is not 2-D,
            or values are not numeric
    """
    if vectors is None:
        raise InvalidInputError("vectors must not be None")

    if isinstance(vectors, np.ndarray):
        if vectors.size == 0 and vectors.ndim <= 2:
            n = vectors.shape[0] if vectors.ndim == 2 else 0
            d = vectors.shape[1] if vectors.ndim == 2 else 0
            return np.zeros((n, d), dtype=np.float64)
        if vectors.ndim != 2:
            raise InvalidInputError(
                f"vectors must be 2-D (n_samples, n_features); got shape {vectors.shape}"
            )
        try:
            return vectors.astype(np.float64, copy=False)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"vectors must be numeric: {e}") from e

    try:
        rows = list(vectors)
    except TypeError as e:
        raise InvalidInputError("vectors must be a sequence of vectors") from e
    if not rows:
        return np.zeros((0, 0), dtype=np.float64)

    dim = None
    for i, row in enumerate(rows):
        try:
            length = len(row)
        except TypeError as e:
            raise InvalidInputError(f"vectors[{i}] is not a sequence") from e
        if dim is None:
            dim = length
        elif length != dim:
            raise InvalidInputError(
                f"Inconsistent vector dimensionality: vectors[0] has {dim} "
                f"components but vectors[{i}] has {length}"
            )

    try:
        X = np.asarray(rows, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"vectors must be numeric: {e}") from e
    return X.reshape(len(rows), dim)


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine distance ``1 - clip(cos(a, b), -1, 1)``.

    Returns 1.0 when either vector has zero norm.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise InvalidInputError(f"Vector shapes differ: {a.shape} vs {b.shape}")
    norm_a = float(np.sqrt(np.dot(a, a)))
    norm_b = float(np.sqrt(np.dot(b, b)))
    if norm_a == 0.0 or norm_b == 0.0:
        return 1.0
    cos_sim = float(np.dot(a, b)) / (norm_a * norm_b)
    return 1.0 - max(-1.0, min(1.0, cos_sim))


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean (L2) distance between two vectors."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise InvalidInputError(f"Vector shapes differ: {a.shape} vs {b.shape}")
    diff = a - b
    return float(np.sqrt(np.dot(diff, diff)))


def cosine_distance_matrix(X: Array2D) -> Array2D:
    """
    Pairwise cosine distances between the rows of *X*.

    Follows the same conventions as ``cosine_distance``: any pair involving a
    zero row has distance 1. The diagonal is 0 for non-zero rows and 1 for
    zero rows.

    Args:
        X: Matrix of shape (n_samples, n_features)

    Returns:
        Distance matrix of shape (n_samples, n_samples)
    """
    n = X.shape[0]
    if n == 0:
        return np.zeros((0, 0), dtype=np.float64)

    dist = cosine_distances(X, X)
    zero = np.sqrt(np.einsum("ij,ij->i", X, X)) == 0.0
    np.fill_diagonal(dist, np.where(zero, 1.0, 0.0))
    return dist


def cosine_distances(X: Array2D, Y: Array2D) -> Array2D:
    """
    Cosine distances between every row of *X* and every row of *Y*.

    Returns:
        Matrix of shape (len(X), len(Y)); pairs involving a zero row are 1
    """
    norms_x = np.sqrt(np.einsum("ij,ij->i", X, X))
    norms_y = np.sqrt(np.einsum("ij,ij->i", Y, Y))
    zero_x = norms_x == 0.0
    zero_y = norms_y == 0.0
    safe_x = np.where(zero_x, 1.0, norms_x)
    safe_y = np.where(zero_y, 1.0, norms_y)

    sims = (X @ Y.T) / np.outer(safe_x, safe_y)
    dist = 1.0 - np.clip(sims, -1.0, 1.0)
    dist[zero_x, :] = 1.0
    dist[:, zero_y] = 1.0
    return dist


def euclidean_distance_matrix(X: Array2D) -> Array2D:
    """Pairwise Euclidean distances between the rows of *X*."""
    n = X.shape[0]
    dist = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        diffs = X - X[i]
        dist[i] = np.sqrt(np.einsum("ij,ij->i", diffs, diffs))
    return dist
