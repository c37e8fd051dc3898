"""
Configuration management for Topic Clustering.

Loads configuration from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Usage:
    from topic_clustering.config import get_config

    config = get_config()

    # Tuner settings (scoring weights, target cluster count, reduction)
    tuner = GridSearchTuner(config.tuning)

    # Logging
    setup_logging(config.log_level)
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


REDUCTION_METHODS = ("pca", "umap")


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the three components of the tuner's combined score."""
    silhouette: float = 0.6
    davies_bouldin: float = 0.3
    num_clusters: float = 0.1

    def __post_init__(self):
        """Reject negative weights."""
        for name in ("silhouette", "davies_bouldin", "num_clusters"):
            if getattr(self, name) < 0:
                raise ValueError(f"Scoring weight '{name}' must be >= 0, got {getattr(self, name)}")


@dataclass(frozen=True)
class ReductionConfig:
    """Optional dimensionality reduction applied before every tuning sweep."""
    enabled: bool = False
    method: str = "pca"
    target_dimensions: Optional[int] = None

    def __post_init__(self):
        """Validate method and target dimensions."""
        if self.method not in REDUCTION_METHODS:
            raise ValueError(
                f"Reduction method must be one of {REDUCTION_METHODS}, got {self.method!r}"
            )
        if self.target_dimensions is not None and self.target_dimensions < 1:
            raise ValueError(
                f"target_dimensions must be >= 1, got {self.target_dimensions}"
            )


@dataclass(frozen=True)
class TuningConfig:
    """
    Configuration for GridSearchTuner.

    Attributes:
        scoring_weights: Weights for silhouette, Davies-Bouldin and cluster count
        target_clusters: Cluster count the closeness score rewards
        reduction: Dimensionality reduction applied to the vectors first
        max_workers: Run combinations on a thread pool when > 1
    """
    scoring_weights: ScoringWeights = field(default_factory=ScoringWeights)
    target_clusters: int = 5
    reduction: ReductionConfig = field(default_factory=ReductionConfig)
    max_workers: Optional[int] = None

    def __post_init__(self):
        """Validate the cluster target and worker count."""
        if self.target_clusters < 1:
            raise ValueError(f"target_clusters must be >= 1, got {self.target_clusters}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from e


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    3. In a container/deployment environment

    Recognised variables:
        TOPIC_CLUSTERING_LOG_LEVEL                 (default INFO)
        TOPIC_CLUSTERING_WEIGHT_SILHOUETTE         (default 0.6)
        TOPIC_CLUSTERING_WEIGHT_DAVIES_BOULDIN     (default 0.3)
        TOPIC_CLUSTERING_WEIGHT_NUM_CLUSTERS       (default 0.1)
        TOPIC_CLUSTERING_TARGET_CLUSTERS           (default 5)
        TOPIC_CLUSTERING_REDUCTION                 none | pca | umap (default none)
        TOPIC_CLUSTERING_REDUCTION_DIMS            (default: method default)
        TOPIC_CLUSTERING_MAX_WORKERS               (default: sequential)
    """

    def __init__(self):
        """Load configuration from environment."""
        self.log_level = os.getenv("TOPIC_CLUSTERING_LOG_LEVEL", "INFO").upper()

        weights = ScoringWeights(
            silhouette=_env_float("TOPIC_CLUSTERING_WEIGHT_SILHOUETTE", 0.6),
            davies_bouldin=_env_float("TOPIC_CLUSTERING_WEIGHT_DAVIES_BOULDIN", 0.3),
            num_clusters=_env_float("TOPIC_CLUSTERING_WEIGHT_NUM_CLUSTERS", 0.1),
        )

        method = os.getenv("TOPIC_CLUSTERING_REDUCTION", "none").strip().lower()
        if method in ("", "none", "off"):
            reduction = ReductionConfig()
        else:
            reduction = ReductionConfig(
                enabled=True,
                method=method,
                target_dimensions=_env_int("TOPIC_CLUSTERING_REDUCTION_DIMS", None),
            )

        self.tuning = TuningConfig(
            scoring_weights=weights,
            target_clusters=_env_int("TOPIC_CLUSTERING_TARGET_CLUSTERS", 5),
            reduction=reduction,
            max_workers=_env_int("TOPIC_CLUSTERING_MAX_WORKERS", None),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """
    Shared configuration instance, built on first use.

    Environment changes after the first call are only picked up after
    ``get_config.cache_clear()``.

    Raises:
        ValueError: If an environment variable holds an invalid value
    """
    return Config()
