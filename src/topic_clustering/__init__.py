"""
Topic Clustering - Core Package

Clustering of embedding vectors with automatic hyperparameter tuning.

This package provides:
- Clustering strategies (DBSCAN, Adaptive DBSCAN, K-Means++, hierarchical,
  Affinity Propagation) behind one interface
- Quality metrics (silhouette, Davies-Bouldin)
- Dimensionality reduction (PCA, simplified UMAP)
- Grid-search tuning across strategies
"""

__version__ = "0.1.0"

from .algorithms import (
    AdaptiveDBSCANStrategy,
    AffinityPropagationStrategy,
    ClusterMetrics,
    ClusteringStrategy,
    DBSCANStrategy,
    GridSearchTuner,
    HierarchicalStrategy,
    KMeansStrategy,
    StrategyCandidate,
    TuningResult,
    evaluate_clustering,
    reduce_dimensionality,
)
from .config import ReductionConfig, ScoringWeights, TuningConfig
from .exceptions import (
    ClusteringError,
    InvalidInputError,
    InvalidParameterError,
    NotFittedError,
)

# Explicitly import subpackages to make them discoverable
from . import algorithms
from . import utils

__all__ = [
    "AdaptiveDBSCANStrategy",
    "AffinityPropagationStrategy",
    "ClusterMetrics",
    "ClusteringStrategy",
    "DBSCANStrategy",
    "GridSearchTuner",
    "HierarchicalStrategy",
    "KMeansStrategy",
    "StrategyCandidate",
    "TuningResult",
    "evaluate_clustering",
    "reduce_dimensionality",
    "ReductionConfig",
    "ScoringWeights",
    "TuningConfig",
    "ClusteringError",
    "InvalidInputError",
    "InvalidParameterError",
    "NotFittedError",
    "algorithms",
    "utils",
]
