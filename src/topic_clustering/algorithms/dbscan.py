"""
Deterministic DBSCAN over cosine distance.

Points are processed in ascending index order and neighbourhoods are expanded
through a FIFO queue that is never reordered, so the same input always yields
the same labels. Cluster ids are 0..k-1 in order of first appearance; noise
points are labelled -1.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np

from .base import NOISE, check_params, compact_labels, empty_labels
from .distance import Array2D, VectorsIn, as_matrix, cosine_distance_matrix
from ..exceptions import InvalidParameterError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_EPSILON = 0.5
DEFAULT_MIN_PTS = 2

ADAPTIVE_EPSILON_GRID = (0.05, 0.1, 0.15, 0.2, 0.25, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8)
ADAPTIVE_MIN_PTS_GRID = (1, 2, 3, 4, 5)

_UNVISITED = 0


def _check_density_params(epsilon: float, min_pts: int) -> None:
    if epsilon < 0:
        raise InvalidParameterError(f"epsilon must be >= 0, got {epsilon}")
    if min_pts < 1:
        raise InvalidParameterError(f"min_pts must be >= 1, got {min_pts}")


def _dbscan_precomputed(dist: Array2D, epsilon: float, min_pts: int) -> np.ndarray:
    """Run DBSCAN on a precomputed distance matrix."""
    _check_density_params(epsilon, min_pts)
    n = dist.shape[0]
    if n == 0:
        return empty_labels()

    # 0 = unvisited, -1 = noise, >= 1 = raw cluster id
    raw = np.zeros(n, dtype=int)
    cluster_id = 0

    def region_query(idx: int) -> List[int]:
        return np.flatnonzero(dist[idx] <= epsilon).tolist()

    for i in range(n):
        if raw[i] != _UNVISITED:
            continue

        neighbors = region_query(i)
        if len(neighbors) < min_pts:
            raw[i] = NOISE
            continue

        cluster_id += 1
        raw[i] = cluster_id

        queue = deque(neighbors)
        queued = set(neighbors)
        while queue:
            j = queue.popleft()
            if raw[j] == NOISE:
                # Border point: absorbed but not expanded
                raw[j] = cluster_id
            elif raw[j] == _UNVISITED:
                raw[j] = cluster_id
                neighbors_j = region_query(j)
                if len(neighbors_j) >= min_pts:
                    for k in neighbors_j:
                        if k not in queued:
                            queued.add(k)
                            queue.append(k)

    return compact_labels(raw, first_seen=True)


def dbscan(
    vectors: VectorsIn,
    epsilon: float = DEFAULT_EPSILON,
    min_pts: int = DEFAULT_MIN_PTS,
) -> np.ndarray:
    """
    Cluster vectors with DBSCAN using cosine distance.

    Args:
        vectors: Input vectors of shape (n_samples, n_features)
        epsilon: Maximum cosine distance between neighbours (inclusive)
        min_pts: Minimum neighbourhood size (point itself included) for a
            core point

    Returns:
        Labels of shape (n_samples,); -1 marks noise

    Raises:
        InvalidInputError: If vectors have inconsistent dimensionality
        InvalidParameterError: If epsilon < 0 or min_pts < 1
    """
    _check_density_params(epsilon, min_pts)
    X = as_matrix(vectors)
    if X.shape[0] == 0:
        return empty_labels()
    return _dbscan_precomputed(cosine_distance_matrix(X), epsilon, min_pts)


def heuristic_score(labels: np.ndarray, n_samples: int) -> float:
    """
    Score a DBSCAN result, favouring about sqrt(n) clusters and little noise.

    Returns:
        ``1 / (1 + noise_ratio + 0.1 * |num_clusters - sqrt(n)|)``, or -1 when
        every point is noise
    """
    labels = np.asarray(labels)
    num_clusters = len(set(labels[labels != NOISE].tolist()))
    if num_clusters == 0:
        return -1.0
    noise_ratio = float(np.sum(labels == NOISE)) / len(labels)
    cluster_penalty = abs(num_clusters - math.sqrt(n_samples))
    return 1.0 / (1.0 + noise_ratio + cluster_penalty * 0.1)


class DBSCANStrategy:
    """
    Plain DBSCAN clustering strategy.

    Params:
        epsilon: Neighbourhood radius in cosine distance (default 0.5)
        min_pts: Minimum neighbourhood size (default 2)
    """

    name = "DBSCAN"
    PARAMS = ("epsilon", "min_pts")

    def cluster(
        self, vectors: VectorsIn, params: Optional[Mapping[str, Any]] = None
    ) -> np.ndarray:
        params = check_params(params, self.PARAMS, self.name)
        epsilon = params.get("epsilon")
        min_pts = params.get("min_pts")
        return dbscan(
            vectors,
            DEFAULT_EPSILON if epsilon is None else epsilon,
            DEFAULT_MIN_PTS if min_pts is None else min_pts,
        )

    def __repr__(self) -> str:
        return "DBSCANStrategy()"


class AdaptiveDBSCANStrategy:
    """
    DBSCAN that sweeps its own (epsilon, min_pts) grid.

    With both ``epsilon`` and ``min_pts`` given the sweep is skipped. With
    ``auto_tune=False`` DBSCAN runs once using the given values or the
    defaults. Otherwise every grid configuration is scored with
    ``heuristic_score`` and the first best one wins; a single supplied value
    pins its axis of the grid.

    Example:
        >>> strategy = AdaptiveDBSCANStrategy()
        >>> labels = strategy.cluster(vectors)
    """

    name = "Adaptive DBSCAN"
    PARAMS = ("epsilon", "min_pts", "auto_tune")

    def __init__(
        self,
        epsilon_grid: Sequence[float] = ADAPTIVE_EPSILON_GRID,
        min_pts_grid: Sequence[int] = ADAPTIVE_MIN_PTS_GRID,
    ) -> None:
        self.epsilon_grid = tuple(epsilon_grid)
        self.min_pts_grid = tuple(min_pts_grid)

    def cluster(
        self, vectors: VectorsIn, params: Optional[Mapping[str, Any]] = None
    ) -> np.ndarray:
        params = check_params(params, self.PARAMS, self.name)
        X = as_matrix(vectors)
        n = X.shape[0]
        if n == 0:
            return empty_labels()

        epsilon = params.get("epsilon")
        min_pts = params.get("min_pts")
        dist = cosine_distance_matrix(X)

        if epsilon is not None and min_pts is not None:
            return _dbscan_precomputed(dist, epsilon, min_pts)

        if params.get("auto_tune", True) is False:
            return _dbscan_precomputed(
                dist,
                DEFAULT_EPSILON if epsilon is None else epsilon,
                DEFAULT_MIN_PTS if min_pts is None else min_pts,
            )

        epsilons = self.epsilon_grid if epsilon is None else (epsilon,)
        min_pts_values = self.min_pts_grid if min_pts is None else (min_pts,)

        best_labels = None
        best_params = None
        best_score = -1.0
        for eps in epsilons:
            for pts in min_pts_values:
                labels = _dbscan_precomputed(dist, eps, pts)
                score = heuristic_score(labels, n)
                if score > best_score:
                    best_score = score
                    best_labels = labels
                    best_params = (eps, pts)

        if best_labels is None:
            logger.debug("Adaptive DBSCAN found no clusters; labelling all %d points as noise", n)
            return np.full(n, NOISE, dtype=int)

        logger.debug(
            "Adaptive DBSCAN selected epsilon=%s, min_pts=%s (score %.3f)",
            best_params[0],
            best_params[1],
            best_score,
        )
        return best_labels

    def __repr__(self) -> str:
        return (
            f"AdaptiveDBSCANStrategy(epsilon_grid={list(self.epsilon_grid)}, "
            f"min_pts_grid={list(self.min_pts_grid)})"
        )
