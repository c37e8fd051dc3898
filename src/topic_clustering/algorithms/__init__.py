"""
Algorithm Core Library - clustering strategies, quality metrics and tuning.

Every algorithm is implemented from first principles on NumPy and is
deterministic for a given input (K-Means given a seed).
"""

from .distance import (
    as_matrix,
    cosine_distance,
    cosine_distance_matrix,
    euclidean_distance,
    euclidean_distance_matrix,
)
from .base import ClusteringStrategy, NOISE
from .dbscan import AdaptiveDBSCANStrategy, DBSCANStrategy, dbscan, heuristic_score
from .kmeans import LCG, KMeansStrategy, find_optimal_k, kmeans
from .hierarchical import HierarchicalStrategy, agglomerate
from .affinity_propagation import AffinityPropagationStrategy, affinity_propagation
from .metrics import ClusterMetrics, davies_bouldin_index, evaluate_clustering, silhouette_score
from .dimensionality_reduction import (
    PCA,
    SimplifiedUMAP,
    create_dimensionality_reducer,
    reduce_dimensionality,
)
from .tuning import (
    GridSearchTuner,
    StrategyCandidate,
    TuningResult,
    calculate_score,
    generate_param_combinations,
)

__all__ = [
    # Distances
    "as_matrix",
    "cosine_distance",
    "cosine_distance_matrix",
    "euclidean_distance",
    "euclidean_distance_matrix",
    # Strategies
    "ClusteringStrategy",
    "NOISE",
    "DBSCANStrategy",
    "AdaptiveDBSCANStrategy",
    "KMeansStrategy",
    "HierarchicalStrategy",
    "AffinityPropagationStrategy",
    "dbscan",
    "heuristic_score",
    "kmeans",
    "LCG",
    "find_optimal_k",
    "agglomerate",
    "affinity_propagation",
    # Metrics
    "ClusterMetrics",
    "silhouette_score",
    "davies_bouldin_index",
    "evaluate_clustering",
    # Dimensionality reduction
    "PCA",
    "SimplifiedUMAP",
    "create_dimensionality_reducer",
    "reduce_dimensionality",
    # Tuning
    "GridSearchTuner",
    "StrategyCandidate",
    "TuningResult",
    "calculate_score",
    "generate_param_combinations",
]
