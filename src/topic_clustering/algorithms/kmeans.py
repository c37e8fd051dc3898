"""
K-Means++ clustering with cosine distance.

All randomness is drawn from a generator local to one ``cluster`` call: a
linear congruential generator when a seed is given (so a seed reproduces the
same labels on every platform), otherwise an unseeded NumPy generator.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

import numpy as np

from .base import check_params, compact_labels, default_num_clusters, empty_labels
from .distance import Array2D, VectorsIn, as_matrix, cosine_distances
from ..exceptions import InvalidParameterError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 100
DEFAULT_K_RANGE = (2, 3, 4, 5, 6, 7, 8)
ELBOW_ITERATIONS = 10


class RandomSource(Protocol):
    """Anything with a ``random()`` method returning a float in [0, 1)."""

    def random(self) -> float:
        ...


class LCG:
    """
    Linear congruential generator.

    ``state = (state * 1664525 + 1013904223) mod 2**32``; each draw returns
    ``state / 2**32``. The seed is reduced modulo 2**32.
    """

    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2 ** 32

    def __init__(self, seed: int) -> None:
        self.state = int(seed) % self.MODULUS

    def random(self) -> float:
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) % self.MODULUS
        return self.state / self.MODULUS


def make_rng(seed: Optional[int] = None) -> RandomSource:
    """Seeded LCG when *seed* is given, otherwise an unseeded NumPy generator."""
    if seed is not None:
        return LCG(seed)
    return np.random.default_rng()


def _kmeanspp_init(X: Array2D, k: int, rng: RandomSource) -> Array2D:
    """
    Choose k initial centroids by the k-means++ rule.

    The first centroid is a uniformly random point. Each further centroid is
    drawn with probability proportional to the cosine distance from a point to
    its nearest chosen centroid, by walking the cumulative distribution with a
    single draw. Index 0 is used when nothing is selected.
    """
    n = X.shape[0]
    centroids = [X[int(rng.random() * n)].copy()]

    for _ in range(1, k):
        dists = cosine_distances(X, np.array(centroids)).min(axis=1)
        total = float(dists.sum())

        r = rng.random()
        selected = 0
        if total > 0:
            cumulative = 0.0
            for j in range(n):
                cumulative += dists[j] / total
                if r <= cumulative:
                    selected = j
                    break
        centroids.append(X[selected].copy())

    return np.array(centroids)


def assign_to_centroids(X: Array2D, centroids: Array2D) -> np.ndarray:
    """Index of the nearest centroid (cosine) per row; ties go to the lowest index."""
    return np.argmin(cosine_distances(X, centroids), axis=1)


def kmeans(
    vectors: VectorsIn,
    k: int,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rng: Optional[RandomSource] = None,
) -> np.ndarray:
    """
    K-Means++ with cosine-distance assignment and mean centroid updates.

    Each iteration assigns every point to its nearest centroid (ties go to
    the lowest centroid index), stops once the assignment repeats, and
    otherwise recomputes centroids as component-wise means. An empty cluster
    is re-seeded to a random point.

    Args:
        vectors: Input vectors of shape (n_samples, n_features)
        k: Number of clusters
        max_iterations: Maximum number of assignment steps
        rng: Random source (default: unseeded NumPy generator)

    Returns:
        Labels of shape (n_samples,) with contiguous ids
    """
    X = as_matrix(vectors)
    n = X.shape[0]
    if n == 0:
        return empty_labels()
    if rng is None:
        rng = make_rng()

    centroids = _kmeanspp_init(X, k, rng)
    labels = np.zeros(n, dtype=int)
    prev_labels = None

    for iteration in range(max_iterations):
        labels = assign_to_centroids(X, centroids)

        if prev_labels is not None and np.array_equal(labels, prev_labels):
            logger.debug("K-Means converged after %d iterations", iteration + 1)
            break
        prev_labels = labels.copy()

        for j in range(k):
            members = X[labels == j]
            if len(members) == 0:
                centroids[j] = X[int(rng.random() * n)]
                continue
            centroids[j] = members.mean(axis=0)

    return compact_labels(labels)


class KMeansStrategy:
    """
    K-Means++ clustering strategy.

    Params:
        k: Number of clusters (default ``max(2, floor(sqrt(n / 2)))``)
        max_iterations: Iteration cap (default 100)
        seed: Integer seed; the same seed always reproduces the same labels

    Example:
        >>> labels = KMeansStrategy().cluster(vectors, {"k": 3, "seed": 123})
    """

    name = "K-Means"
    PARAMS = ("k", "max_iterations", "seed")

    def cluster(
        self, vectors: VectorsIn, params: Optional[Mapping[str, Any]] = None
    ) -> np.ndarray:
        params = check_params(params, self.PARAMS, self.name)
        X = as_matrix(vectors)
        n = X.shape[0]
        if n == 0:
            return empty_labels()

        k = params.get("k") or default_num_clusters(n)
        max_iterations = params.get("max_iterations") or DEFAULT_MAX_ITERATIONS
        rng = make_rng(params.get("seed"))
        return kmeans(X, int(k), int(max_iterations), rng)

    def __repr__(self) -> str:
        return "KMeansStrategy()"


def find_optimal_k(
    vectors: VectorsIn,
    k_range: Sequence[int] = DEFAULT_K_RANGE,
    seed: Optional[int] = None,
) -> int:
    """
    Pick a cluster count with the elbow method.

    For every k, runs a short Euclidean k-means from randomly chosen points
    and records the inertia. The elbow is where the drop in inertia slows
    down the most.

    Args:
        vectors: Input vectors of shape (n_samples, n_features)
        k_range: Candidate cluster counts, ascending
        seed: Optional seed for the random initial centroids

    Returns:
        Selected k from *k_range*
    """
    k_range = list(k_range)
    if not k_range:
        raise InvalidParameterError("k_range must not be empty")
    X = as_matrix(vectors)
    n = X.shape[0]
    fallback = k_range[len(k_range) // 2]
    if n == 0:
        return fallback

    rng = make_rng(seed)
    inertias = []
    for k in k_range:
        centroids = np.array([X[int(rng.random() * n)] for _ in range(k)])
        labels = np.zeros(n, dtype=int)
        for _ in range(ELBOW_ITERATIONS):
            sq = np.sum((X[:, None, :] - centroids[None, :, :]) ** 2, axis=2)
            labels = np.argmin(sq, axis=1)
            for j in range(k):
                members = X[labels == j]
                if len(members) > 0:
                    centroids[j] = members.mean(axis=0)
        diffs = X - centroids[labels]
        inertias.append(float(np.sum(diffs ** 2)))

    rate_of_change = [inertias[i - 1] - inertias[i] for i in range(1, len(inertias))]

    max_change = -np.inf
    elbow_idx = 0
    for i in range(1, len(rate_of_change)):
        change = rate_of_change[i - 1] - rate_of_change[i]
        if change > max_change:
            max_change = change
            elbow_idx = i

    if elbow_idx + 1 < len(k_range):
        return k_range[elbow_idx + 1]
    return fallback
