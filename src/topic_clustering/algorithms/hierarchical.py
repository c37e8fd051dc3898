"""
Hierarchical agglomerative clustering over cosine distance.

Fully deterministic: the closest pair of active clusters is found by scanning
cluster indices in ascending order, ties resolve to the first pair found and
the higher index is always merged into the lower one.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import numpy as np

from .base import check_params, default_num_clusters, empty_labels
from .distance import Array2D, VectorsIn, as_matrix, cosine_distance_matrix
from ..exceptions import InvalidParameterError

LINKAGES = ("single", "complete", "average")
DEFAULT_LINKAGE = "average"


def agglomerate(dist: Array2D, num_clusters: int, linkage: str = DEFAULT_LINKAGE) -> np.ndarray:
    """
    Merge singleton clusters bottom-up until *num_clusters* remain.

    Linkage distances between active clusters are kept in a matrix and
    updated after every merge: single keeps the minimum pairwise distance,
    complete the maximum, and average divides the summed pairwise distances
    by the product of the cluster sizes.

    Args:
        dist: Precomputed pairwise distance matrix of shape (n, n)
        num_clusters: Number of clusters to stop at
        linkage: "single", "complete" or "average"

    Returns:
        Labels numbered by ascending surviving cluster index
    """
    if linkage not in LINKAGES:
        raise InvalidParameterError(
            f"linkage must be one of {LINKAGES}, got {linkage!r}"
        )
    n = dist.shape[0]
    if n == 0:
        return empty_labels()

    # For average linkage `between` holds distance sums, otherwise the linkage value
    between = dist.astype(np.float64, copy=True)
    sizes = np.ones(n, dtype=np.float64)
    active = np.ones(n, dtype=bool)
    owner = np.arange(n)
    upper = np.triu(np.ones((n, n), dtype=bool), k=1)

    n_active = n
    while n_active > num_clusters and n_active > 1:
        if linkage == "average":
            linkage_dist = between / np.outer(sizes, sizes)
        else:
            linkage_dist = between.copy()
        valid = upper & active[:, None] & active[None, :]
        linkage_dist[~valid] = np.inf

        # Row-major argmin == first (i, j) pair found scanning i, then j ascending
        flat = int(np.argmin(linkage_dist))
        i, j = divmod(flat, n)
        if not np.isfinite(linkage_dist[i, j]):
            break

        if linkage == "single":
            merged = np.minimum(between[i], between[j])
        elif linkage == "complete":
            merged = np.maximum(between[i], between[j])
        else:
            merged = between[i] + between[j]
        between[i, :] = merged
        between[:, i] = merged
        sizes[i] += sizes[j]
        active[j] = False
        owner[owner == j] = i
        n_active -= 1

    survivors = np.flatnonzero(active)
    relabel = {int(idx): label for label, idx in enumerate(survivors)}
    return np.array([relabel[int(o)] for o in owner], dtype=int)


class HierarchicalStrategy:
    """
    Hierarchical agglomerative clustering strategy.

    Params:
        num_clusters: Clusters to stop at (default ``max(2, floor(sqrt(n / 2)))``)
        linkage: "single", "complete" or "average" (default "average")

    Example:
        >>> strategy = HierarchicalStrategy()
        >>> labels = strategy.cluster(vectors, {"num_clusters": 3, "linkage": "complete"})
    """

    name = "Hierarchical"
    PARAMS = ("num_clusters", "linkage")

    def cluster(
        self, vectors: VectorsIn, params: Optional[Mapping[str, Any]] = None
    ) -> np.ndarray:
        params = check_params(params, self.PARAMS, self.name)
        X = as_matrix(vectors)
        n = X.shape[0]
        if n == 0:
            return empty_labels()

        num_clusters = params.get("num_clusters") or default_num_clusters(n)
        linkage = params.get("linkage") or DEFAULT_LINKAGE

        dist = cosine_distance_matrix(X)
        np.fill_diagonal(dist, 0.0)
        return agglomerate(dist, int(num_clusters), linkage)

    def __repr__(self) -> str:
        return "HierarchicalStrategy()"
