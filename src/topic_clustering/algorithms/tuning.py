"""
Grid-search hyperparameter tuning across clustering strategies.

Every combination of a parameter grid is clustered, evaluated and scored;
results are ranked by a combined score that blends silhouette,
Davies-Bouldin and closeness to a target cluster count.
"""

from __future__ import annotations

import itertools
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .base import ClusteringStrategy
from .dimensionality_reduction import reduce_dimensionality
from .distance import Array2D, VectorsIn, as_matrix
from .metrics import ClusterMetrics, evaluate_clustering
from ..config import ScoringWeights, TuningConfig
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

ParamGrid = Mapping[str, Sequence[Any]]


@dataclass(frozen=True)
class TuningResult:
    """
    Outcome of one (strategy, parameter combination) evaluation.

    Attributes:
        algorithm_name: Name of the strategy that produced the labels
        params: Parameter combination passed to the strategy
        metrics: Quality metrics for the labels
        labels: Cluster assignments
        score: Combined score used for ranking (higher is better)
    """

    algorithm_name: str
    params: Dict[str, Any]
    metrics: ClusterMetrics
    labels: np.ndarray = field(compare=False)
    score: float

    def __repr__(self) -> str:
        return (
            f"TuningResult(algorithm={self.algorithm_name!r}, params={self.params}, "
            f"score={self.score:.3f}, clusters={self.metrics.num_clusters})"
        )


@dataclass(frozen=True)
class StrategyCandidate:
    """A strategy together with the parameter grid to tune it over."""

    strategy: ClusteringStrategy
    param_grid: ParamGrid


def generate_param_combinations(param_grid: ParamGrid) -> List[Dict[str, Any]]:
    """
    Cartesian product of a parameter grid in key-declaration order.

    The last key varies fastest. An empty grid yields a single empty
    combination; a key with no values yields none.
    """
    keys = list(param_grid.keys())
    values = [list(param_grid[key]) for key in keys]
    return [dict(zip(keys, combo)) for combo in itertools.product(*values)]


def calculate_score(
    metrics: ClusterMetrics,
    weights: Optional[ScoringWeights] = None,
    target_clusters: int = 5,
) -> float:
    """
    Combined score of a clustering (higher is better).

    silhouette is mapped from [-1, 1] to [0, 1], Davies-Bouldin to
    ``max(0, 1 - db / 2)`` and the cluster count to
    ``max(0, 1 - |num_clusters - target| / target)``; the three are combined
    as a weighted sum.
    """
    weights = weights or ScoringWeights()
    silhouette_norm = (metrics.silhouette + 1) / 2
    db_norm = max(0.0, 1 - metrics.davies_bouldin / 2)
    cluster_penalty = abs(metrics.num_clusters - target_clusters) / target_clusters
    cluster_score = max(0.0, 1 - cluster_penalty)

    return (
        weights.silhouette * silhouette_norm
        + weights.davies_bouldin * db_norm
        + weights.num_clusters * cluster_score
    )


class GridSearchTuner:
    """
    Grid search over clustering parameters.

    Example:
        >>> tuner = GridSearchTuner()
        >>> results = tuner.tune(KMeansStrategy(), vectors, {"k": [2, 3, 4], "seed": [42]})
        >>> best = results[0]
        >>> print(f"Best: {best.params} with score {best.score:.3f}")
    """

    def __init__(self, config: Optional[TuningConfig] = None) -> None:
        """
        Args:
            config: Scoring weights, target cluster count, optional
                dimensionality reduction and worker count (default:
                ``TuningConfig()``)
        """
        self.config = config or TuningConfig()

    def tune(
        self,
        strategy: ClusteringStrategy,
        vectors: VectorsIn,
        param_grid: ParamGrid,
    ) -> List[TuningResult]:
        """
        Evaluate every parameter combination of *param_grid* for *strategy*.

        A combination whose clustering raises is logged and skipped.

        Args:
            strategy: Clustering strategy to tune
            vectors: Input vectors of shape (n_samples, n_features)
            param_grid: Mapping of parameter name to candidate values

        Returns:
            Results sorted by descending score; equal scores keep generation
            order. Empty for empty input.

        Raises:
            InvalidInputError: If vectors have inconsistent dimensionality
        """
        X = as_matrix(vectors)
        if X.shape[0] == 0:
            return []

        X = self._preprocess(X)
        combinations = generate_param_combinations(param_grid)
        logger.info(
            "Testing %d parameter combinations for %s", len(combinations), strategy.name
        )

        workers = self.config.max_workers
        if workers is not None and workers > 1 and len(combinations) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(
                    executor.map(lambda p: self._evaluate(strategy, X, p), combinations)
                )
        else:
            outcomes = [self._evaluate(strategy, X, params) for params in combinations]

        results = [r for r in outcomes if r is not None]
        # list.sort is stable, so ties stay in generation order
        results.sort(key=lambda r: r.score, reverse=True)
        return results

    def compare_strategies(
        self,
        candidates: Sequence[Union[StrategyCandidate, Tuple[ClusteringStrategy, ParamGrid]]],
        vectors: VectorsIn,
    ) -> Optional[TuningResult]:
        """
        Tune every candidate strategy and return the best result overall.

        Args:
            candidates: ``StrategyCandidate`` objects or ``(strategy, param_grid)`` pairs
            vectors: Input vectors of shape (n_samples, n_features)

        Returns:
            Highest-scoring result (earliest on ties), or None if no
            combination produced a result

        Raises:
            InvalidInputError: If vectors have inconsistent dimensionality
        """
        X = as_matrix(vectors)
        all_results: List[TuningResult] = []
        for candidate in candidates:
            if isinstance(candidate, StrategyCandidate):
                strategy, param_grid = candidate.strategy, candidate.param_grid
            else:
                strategy, param_grid = candidate
            all_results.extend(self.tune(strategy, X, param_grid))

        if not all_results:
            return None

        all_results.sort(key=lambda r: r.score, reverse=True)

        logger.info("=== Top %d Results ===", min(5, len(all_results)))
        for rank, result in enumerate(all_results[:5], start=1):
            logger.info(
                "%d. %s - Score: %.3f, Params: %s, Silhouette: %.3f, DB Index: %.3f, "
                "Clusters: %d, Noise: %d",
                rank,
                result.algorithm_name,
                result.score,
                result.params,
                result.metrics.silhouette,
                result.metrics.davies_bouldin,
                result.metrics.num_clusters,
                result.metrics.num_noise,
            )

        return all_results[0]

    def _preprocess(self, X: Array2D) -> Array2D:
        reduction = self.config.reduction
        if not reduction.enabled:
            return X
        return reduce_dimensionality(X, reduction.method, reduction.target_dimensions)

    def _evaluate(
        self, strategy: ClusteringStrategy, X: Array2D, params: Dict[str, Any]
    ) -> Optional[TuningResult]:
        """Cluster, evaluate and score one combination; None if it fails."""
        try:
            labels = np.asarray(strategy.cluster(X, dict(params)), dtype=int)
            metrics = evaluate_clustering(X, labels)
        except Exception as e:
            logger.warning("%s failed with params %s: %s", strategy.name, params, e)
            return None

        score = calculate_score(
            metrics, self.config.scoring_weights, self.config.target_clusters
        )
        logger.debug(
            "Params: %s, Score: %.3f, Silhouette: %.3f, Clusters: %d, Noise: %d",
            params,
            score,
            metrics.silhouette,
            metrics.num_clusters,
            metrics.num_noise,
        )
        return TuningResult(
            algorithm_name=strategy.name,
            params=dict(params),
            metrics=metrics,
            labels=labels,
            score=score,
        )

    def __repr__(self) -> str:
        return f"GridSearchTuner(config={self.config})"
