"""
Affinity Propagation clustering.

Points exchange responsibility and availability messages over a similarity
matrix (negative cosine distance) until exemplars emerge; every point then
joins its most similar exemplar. The number of clusters is not given up
front, it follows from the preference on the diagonal.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import numpy as np

from .base import check_params, compact_labels, empty_labels
from .distance import Array2D, VectorsIn, as_matrix, cosine_distance_matrix
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DAMPING = 0.5
DEFAULT_MAX_ITERATIONS = 200


def similarity_matrix(X: Array2D, preference: Optional[float] = None) -> Array2D:
    """
    Negative cosine distance with *preference* on the diagonal.

    The default preference is the median of all off-diagonal similarities.
    """
    n = X.shape[0]
    S = -cosine_distance_matrix(X)
    if preference is None:
        off_diagonal = S[~np.eye(n, dtype=bool)]
        preference = float(np.median(off_diagonal)) if off_diagonal.size else 0.0
    np.fill_diagonal(S, preference)
    return S


def _update_responsibilities(S: Array2D, A: Array2D) -> Array2D:
    """R[i, k] = S[i, k] - max over k' != k of (A[i, k'] + S[i, k'])."""
    n = S.shape[0]
    if n == 1:
        return S.copy()
    AS = A + S
    rows = np.arange(n)
    first_idx = np.argmax(AS, axis=1)
    first = AS[rows, first_idx]
    AS[rows, first_idx] = -np.inf
    second = AS.max(axis=1)

    competitor = np.repeat(first[:, None], n, axis=1)
    competitor[rows, first_idx] = second
    return S - competitor


def _update_availabilities(R: Array2D) -> Array2D:
    """
    A[k, k] = sum of positive R[i', k] over i' != k;
    A[i, k] = min(0, R[k, k] + sum of positive R[i', k] over i' not in {i, k}).
    """
    positive = np.maximum(R, 0.0)
    np.fill_diagonal(positive, np.diag(R))
    column_sums = positive.sum(axis=0)

    A = column_sums[None, :] - positive
    self_availability = np.diag(A).copy()
    A = np.minimum(A, 0.0)
    np.fill_diagonal(A, self_availability)
    return A


def assign_to_exemplars(S: Array2D, exemplars: np.ndarray) -> np.ndarray:
    """Position in *exemplars* of each point's most similar exemplar; ties go to the earlier one."""
    # argmax returns the first maximum
    return np.argmax(S[:, exemplars], axis=1)


def affinity_propagation(
    vectors: VectorsIn,
    damping: float = DEFAULT_DAMPING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    preference: Optional[float] = None,
) -> np.ndarray:
    """
    Cluster vectors with Affinity Propagation.

    Runs exactly *max_iterations* damped message-passing rounds. Points with
    ``R[i, i] + A[i, i] > 0`` become exemplars (in ascending index order) and
    each point takes the label of its most similar exemplar, first exemplar
    winning ties.

    Args:
        vectors: Input vectors of shape (n_samples, n_features)
        damping: Weight of the previous message in each update
        max_iterations: Number of message-passing rounds
        preference: Diagonal similarity (default: median similarity)

    Returns:
        Labels of shape (n_samples,); all 0 when no exemplar emerges
    """
    X = as_matrix(vectors)
    n = X.shape[0]
    if n == 0:
        return empty_labels()

    S = similarity_matrix(X, preference)
    R = np.zeros((n, n))
    A = np.zeros((n, n))

    for _ in range(max_iterations):
        R = damping * R + (1 - damping) * _update_responsibilities(S, A)
        A = damping * A + (1 - damping) * _update_availabilities(R)

    exemplars = np.flatnonzero(np.diag(R) + np.diag(A) > 0)
    if exemplars.size == 0:
        logger.debug("Affinity Propagation found no exemplars; assigning all points to 0")
        return np.zeros(n, dtype=int)

    labels = assign_to_exemplars(S, exemplars)
    logger.debug("Affinity Propagation found %d exemplars", exemplars.size)
    return compact_labels(labels)


class AffinityPropagationStrategy:
    """
    Affinity Propagation clustering strategy.

    Params:
        damping: Message damping factor (default 0.5)
        max_iterations: Number of iterations (default 200)
        preference: Self-similarity; lower values give fewer clusters
            (default: median off-diagonal similarity)
    """

    name = "Affinity Propagation"
    PARAMS = ("damping", "max_iterations", "preference")

    def cluster(
        self, vectors: VectorsIn, params: Optional[Mapping[str, Any]] = None
    ) -> np.ndarray:
        params = check_params(params, self.PARAMS, self.name)
        return affinity_propagation(
            vectors,
            damping=params.get("damping") or DEFAULT_DAMPING,
            max_iterations=params.get("max_iterations") or DEFAULT_MAX_ITERATIONS,
            preference=params.get("preference"),
        )

    def __repr__(self) -> str:
        return "AffinityPropagationStrategy()"
