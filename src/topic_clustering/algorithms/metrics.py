"""
Clustering quality metrics.

Provides silhouette score, Davies-Bouldin index and the ClusterMetrics record
the tuner ranks configurations by. Noise points (label -1) never count as a
cluster.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .distance import (
    Array2D,
    VectorsIn,
    as_matrix,
    cosine_distance,
    cosine_distance_matrix,
    euclidean_distance_matrix,
)
from ..exceptions import InvalidParameterError

NOISE = -1

DISTANCE_METRICS = ("cosine", "euclidean")


@dataclass(frozen=True)
class ClusterMetrics:
    """
    Quality metrics for one label assignment.

    Attributes:
        silhouette: Mean silhouette over non-noise points, in [-1, 1]
        davies_bouldin: Davies-Bouldin index, >= 0 (lower is better)
        num_clusters: Number of distinct non-noise clusters
        num_noise: Number of points labelled -1
        cluster_sizes: Size of each cluster, in order of first appearance
    """

    silhouette: float
    davies_bouldin: float
    num_clusters: int
    num_noise: int
    cluster_sizes: Tuple[int, ...]

    def __repr__(self) -> str:
        return (
            f"ClusterMetrics(num_clusters={self.num_clusters}, "
            f"silhouette={self.silhouette:.3f}, "
            f"davies_bouldin={self.davies_bouldin:.3f}, "
            f"num_noise={self.num_noise})"
        )


def _cluster_ids(labels: np.ndarray) -> List[int]:
    """Distinct non-noise labels in order of first appearance."""
    seen = {}
    for label in labels.tolist():
        if label != NOISE and label not in seen:
            seen[label] = None
    return list(seen)


def _pairwise(X: Array2D, metric: str) -> Array2D:
    if metric == "cosine":
        return cosine_distance_matrix(X)
    if metric == "euclidean":
        return euclidean_distance_matrix(X)
    raise InvalidParameterError(
        f"distance metric must be one of {DISTANCE_METRICS}, got {metric!r}"
    )


def silhouette_score(
    vectors: VectorsIn, labels: Sequence[int], metric: str = "cosine"
) -> float:
    """
    Mean silhouette coefficient over all non-noise points.

    For point i in cluster C, a(i) is the mean distance to the other members
    of C (0 when i is alone in C) and b(i) the smallest mean distance to any
    other cluster. The point score is (b - a) / max(a, b), or 0 if both are 0.

    Args:
        vectors: Input vectors of shape (n_samples, n_features)
        labels: Cluster labels, -1 for noise
        metric: "cosine" (default) or "euclidean"

    Returns:
        Score in [-1, 1]; 0 for empty input, mismatched lengths, or fewer
        than two non-noise clusters
    """
    X = as_matrix(vectors)
    labels = np.asarray(labels, dtype=int).reshape(-1)
    if X.shape[0] == 0 or X.shape[0] != labels.shape[0]:
        return 0.0

    clusters = _cluster_ids(labels)
    if len(clusters) < 2:
        return 0.0

    dist = _pairwise(X, metric)
    masks = [labels == c for c in clusters]
    sizes = np.array([m.sum() for m in masks], dtype=np.float64)
    # sums[i, c]: total distance from point i to members of cluster c
    sums = np.stack([dist[:, m].sum(axis=1) for m in masks], axis=1)
    position = {c: idx for idx, c in enumerate(clusters)}

    total = 0.0
    count = 0
    for i, label in enumerate(labels.tolist()):
        if label == NOISE:
            continue
        own = position[label]
        if sizes[own] > 1:
            a = (sums[i, own] - dist[i, i]) / (sizes[own] - 1)
        else:
            a = 0.0
        others = [sums[i, c] / sizes[c] for c in range(len(clusters)) if c != own]
        b = min(others)
        denom = max(a, b)
        total += (b - a) / denom if denom > 0 else 0.0
        count += 1

    return float(total / count) if count else 0.0


def davies_bouldin_index(vectors: VectorsIn, labels: Sequence[int]) -> float:
    """
    Davies-Bouldin index using cosine distances (lower is better).

    Each cluster's scatter is the mean cosine distance of its members to the
    arithmetic-mean centroid. For every cluster the worst ratio
    (scatter_i + scatter_j) / distance(centroid_i, centroid_j) is taken, and
    the index is the mean of those ratios.

    Returns:
        Index >= 0; 0 when there are fewer than two non-noise clusters
    """
    X = as_matrix(vectors)
    labels = np.asarray(labels, dtype=int).reshape(-1)
    if X.shape[0] == 0 or X.shape[0] != labels.shape[0]:
        return 0.0

    clusters = _cluster_ids(labels)
    if len(clusters) < 2:
        return 0.0

    centroids = []
    scatter = []
    for c in clusters:
        members = X[labels == c]
        centroid = members.mean(axis=0)
        centroids.append(centroid)
        scatter.append(
            sum(cosine_distance(point, centroid) for point in members) / len(members)
        )

    db_index = 0.0
    for i in range(len(clusters)):
        max_ratio = 0.0
        for j in range(len(clusters)):
            if i == j:
                continue
            numerator = scatter[i] + scatter[j]
            separation = cosine_distance(centroids[i], centroids[j])
            if separation > 0:
                ratio = numerator / separation
            else:
                ratio = float("inf") if numerator > 0 else 0.0
            max_ratio = max(max_ratio, ratio)
        db_index += max_ratio

    return float(db_index / len(clusters))


def evaluate_clustering(
    vectors: VectorsIn, labels: Sequence[int], metric: str = "cosine"
) -> ClusterMetrics:
    """
    Evaluate a label assignment with all metrics.

    Args:
        vectors: Input vectors of shape (n_samples, n_features)
        labels: Cluster labels, -1 for noise
        metric: Distance metric for the silhouette score

    Returns:
        ClusterMetrics; all zero (with no sizes) for empty input
    """
    X = as_matrix(vectors)
    labels = np.asarray(labels, dtype=int).reshape(-1)

    clusters = _cluster_ids(labels)
    cluster_sizes = tuple(int(np.sum(labels == c)) for c in clusters)

    return ClusterMetrics(
        silhouette=silhouette_score(X, labels, metric),
        davies_bouldin=davies_bouldin_index(X, labels),
        num_clusters=len(clusters),
        num_noise=int(np.sum(labels == NOISE)),
        cluster_sizes=cluster_sizes,
    )
