"""
Dimensionality reduction for vectors before clustering.

PCA: linear, preserves global structure. Eigenvectors of the covariance
matrix are extracted one at a time by power iteration with deflation.

SimplifiedUMAP: non-linear, preserves local structure. A lightweight
force-directed refinement of a PCA embedding along a k-nearest-neighbour
graph, not a full UMAP implementation.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

import numpy as np

from .distance import Array2D, VectorsIn, as_matrix, euclidean_distance_matrix
from ..exceptions import InvalidParameterError, NotFittedError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PCA_COMPONENTS = 40
DEFAULT_UMAP_COMPONENTS = 15
DEFAULT_UMAP_NEIGHBORS = 15
DEFAULT_UMAP_MIN_DIST = 0.1

POWER_ITERATION_MAX_ITER = 100
POWER_ITERATION_TOL = 1e-6

REDUCTION_METHODS = ("pca", "umap")


class PCA:
    """
    Principal Component Analysis via power iteration.

    Example:
        >>> pca = PCA(seed=0)
        >>> reduced = pca.fit_transform(vectors, n_components=10)
        >>> pca.explained_variance_ratio()
    """

    def __init__(self, seed: Optional[int] = 0) -> None:
        """
        Args:
            seed: Seed for the random starting vectors of power iteration
        """
        self.seed = seed
        self.components: Optional[Array2D] = None
        self.mean: Optional[np.ndarray] = None
        self.explained_variance: Optional[np.ndarray] = None
        self.total_variance: float = 0.0

    def fit_transform(
        self, vectors: VectorsIn, n_components: int = DEFAULT_PCA_COMPONENTS
    ) -> Array2D:
        """
        Fit the model and project *vectors* onto the principal components.

        Args:
            vectors: Input data of shape (n_samples, n_features)
            n_components: Components to keep, capped at min(n_samples, n_features)

        Returns:
            Projected data of shape (n_samples, n_components_used)
        """
        X = as_matrix(vectors)
        n, d = X.shape
        if n == 0:
            self.components = np.zeros((0, d))
            self.mean = np.zeros(d)
            self.explained_variance = np.zeros(0)
            self.total_variance = 0.0
            return np.zeros((0, 0))

        k = int(min(n_components, n, d))
        self.mean = X.mean(axis=0)
        Xc = X - self.mean
        covariance = (Xc.T @ Xc) / max(n - 1, 1)
        self.total_variance = float(np.trace(covariance))

        vectors_, values = self._power_iteration(covariance, k)
        self.components = vectors_
        self.explained_variance = values
        return self.transform(X)

    def transform(self, vectors: VectorsIn) -> Array2D:
        """Project *vectors* with the fitted mean and components."""
        if self.components is None or self.mean is None:
            raise NotFittedError("PCA model not fitted. Call fit_transform first.")
        X = as_matrix(vectors)
        if X.shape[0] == 0:
            return np.zeros((0, self.components.shape[0]))
        return (X - self.mean) @ self.components.T

    def explained_variance_ratio(self) -> np.ndarray:
        """Share of the total variance carried by each extracted component."""
        if self.explained_variance is None:
            raise NotFittedError("PCA model not fitted.")
        if self.total_variance == 0.0:
            return np.zeros_like(self.explained_variance)
        return self.explained_variance / self.total_variance

    def _power_iteration(self, matrix: Array2D, k: int) -> Tuple[Array2D, np.ndarray]:
        """Top-k eigenvectors (rows) and absolute eigenvalues of a symmetric matrix."""
        rng = np.random.default_rng(self.seed)
        dim = matrix.shape[0]
        A = matrix.copy()
        vectors: List[np.ndarray] = []
        values: List[float] = []

        for _ in range(k):
            v = rng.random(dim) - 0.5
            v /= np.linalg.norm(v)

            for _ in range(POWER_ITERATION_MAX_ITER):
                Av = A @ v
                norm = np.linalg.norm(Av)
                if norm == 0.0:
                    # Remaining variance is exhausted
                    break
                v_new = Av / norm
                diff = float(np.abs(v - v_new).sum())
                v = v_new
                if diff < POWER_ITERATION_TOL:
                    break

            eigenvalue = float(v @ (A @ v))
            vectors.append(v)
            values.append(abs(eigenvalue))

            A -= eigenvalue * np.outer(v, v)

        return np.array(vectors).reshape(k, dim), np.array(values)

    def __repr__(self) -> str:
        fitted = self.components is not None
        return f"PCA(seed={self.seed}, fitted={fitted})"


class SimplifiedUMAP:
    """
    Simplified manifold projection in the spirit of UMAP.

    Builds a k-nearest-neighbour graph (Euclidean), weights edges with
    ``exp(-d / sigma)`` where sigma is the point's nearest-neighbour distance,
    starts from a PCA embedding and refines it for a fixed number of epochs
    with attraction along graph edges and repulsion from random samples.
    """

    def __init__(
        self,
        n_neighbors: int = DEFAULT_UMAP_NEIGHBORS,
        min_dist: float = DEFAULT_UMAP_MIN_DIST,
        n_components: int = DEFAULT_UMAP_COMPONENTS,
        n_epochs: int = 200,
        learning_rate: float = 1.0,
        negative_samples: int = 5,
        seed: Optional[int] = 0,
    ) -> None:
        self.n_neighbors = n_neighbors
        self.min_dist = min_dist
        self.n_components = n_components
        self.n_epochs = n_epochs
        self.learning_rate = learning_rate
        self.negative_samples = negative_samples
        self.seed = seed

    def fit_transform(self, vectors: VectorsIn) -> Array2D:
        """Embed *vectors* into ``n_components`` dimensions."""
        X = as_matrix(vectors)
        if X.shape[0] == 0:
            return np.zeros((0, 0))

        dist = euclidean_distance_matrix(X)
        neighbors = self._find_knn(dist, self.n_neighbors)
        weights = self._compute_weights(dist, neighbors)

        embedding = PCA(seed=self.seed).fit_transform(X, self.n_components)
        return self._optimize_embedding(embedding, neighbors, weights)

    @staticmethod
    def _find_knn(dist: Array2D, k: int) -> List[np.ndarray]:
        """Indices of the k nearest other points, closest first (stable on ties)."""
        n = dist.shape[0]
        neighbors = []
        for i in range(n):
            others = np.array([j for j in range(n) if j != i], dtype=int)
            order = np.argsort(dist[i, others], kind="stable")
            neighbors.append(others[order[:k]])
        return neighbors

    @staticmethod
    def _compute_weights(dist: Array2D, neighbors: List[np.ndarray]) -> Array2D:
        """Symmetric exponential-decay edge weights."""
        n = dist.shape[0]
        weights = np.zeros((n, n))
        for i, neighbor_idx in enumerate(neighbors):
            if neighbor_idx.size == 0:
                continue
            distances = dist[i, neighbor_idx]
            sigma = distances[0] + 1e-8
            for j, d in zip(neighbor_idx.tolist(), distances.tolist()):
                w = np.exp(-d / sigma)
                weights[i, j] = w
                weights[j, i] = w
        return weights

    def _optimize_embedding(
        self, embedding: Array2D, neighbors: List[np.ndarray], weights: Array2D
    ) -> Array2D:
        """Force-directed refinement with linearly decaying learning rate."""
        rng = np.random.default_rng(self.seed)
        optimized = embedding.copy()
        n = optimized.shape[0]
        n_samples = self.negative_samples

        for epoch in range(self.n_epochs):
            alpha = self.learning_rate * (1 - epoch / self.n_epochs)

            for i in range(n):
                neighbor_idx = neighbors[i]
                grad = (weights[i, neighbor_idx][:, None] * (optimized[neighbor_idx] - optimized[i])).sum(axis=0)

                for j in rng.integers(0, n, size=n_samples).tolist():
                    if j == i:
                        continue
                    diff = optimized[i] - optimized[j]
                    dist = np.sqrt(diff @ diff) + 1e-8
                    repulsion = self.min_dist / (dist * n_samples)
                    grad -= repulsion * diff / dist

                optimized[i] += alpha * grad

        return optimized

    def __repr__(self) -> str:
        return (
            f"SimplifiedUMAP(n_neighbors={self.n_neighbors}, "
            f"min_dist={self.min_dist}, n_components={self.n_components})"
        )


def create_dimensionality_reducer(
    method: str, target_dimensions: Optional[int] = None
) -> Union[PCA, SimplifiedUMAP]:
    """
    Create a reducer for *method* ("pca" or "umap").

    PCA takes its component count at ``fit_transform`` time, so
    *target_dimensions* only configures the UMAP reducer here.
    """
    if method == "pca":
        return PCA()
    if method == "umap":
        return SimplifiedUMAP(
            n_neighbors=DEFAULT_UMAP_NEIGHBORS,
            min_dist=DEFAULT_UMAP_MIN_DIST,
            n_components=target_dimensions or DEFAULT_UMAP_COMPONENTS,
        )
    raise InvalidParameterError(
        f"Reduction method must be one of {REDUCTION_METHODS}, got {method!r}"
    )


def reduce_dimensionality(
    vectors: VectorsIn,
    method: str = "pca",
    target_dimensions: Optional[int] = None,
) -> Array2D:
    """
    Reduce *vectors* with PCA (default 40 dims) or SimplifiedUMAP (default 15).

    Args:
        vectors: Input data of shape (n_samples, n_features)
        method: "pca" or "umap"
        target_dimensions: Output dimensionality (default depends on method)

    Returns:
        Reduced data of shape (n_samples, n_dims_used)
    """
    X = as_matrix(vectors)
    if X.shape[0] == 0:
        return X

    original_dim = X.shape[1]
    reducer = create_dimensionality_reducer(method, target_dimensions)

    if method == "pca":
        dims = target_dimensions or DEFAULT_PCA_COMPONENTS
        reduced = reducer.fit_transform(X, dims)
        total_variance = float(reducer.explained_variance_ratio().sum())
        logger.info(
            "PCA: %dD -> %dD (explained variance of extracted components: %.2f%%)",
            original_dim,
            reduced.shape[1],
            total_variance * 100,
        )
        return reduced

    reduced = reducer.fit_transform(X)
    logger.info(
        "UMAP: %dD -> %dD, preserving local structure with %d neighbors",
        original_dim,
        reduced.shape[1],
        reducer.n_neighbors,
    )
    return reduced
