"""
Command line entry point.

Reads embedding vectors from a JSON file (a list of equal-length lists of
numbers), tunes the selected clustering algorithms over their default
parameter grids and prints the best result as JSON.

Usage:
    topic-clustering vectors.json
    topic-clustering vectors.json --algorithms kmeans hierarchical --seed 7
    cat vectors.json | topic-clustering - --reduce pca --dims 10
"""

import argparse
import json
import math
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from .algorithms import (
    AdaptiveDBSCANStrategy,
    AffinityPropagationStrategy,
    DBSCANStrategy,
    GridSearchTuner,
    HierarchicalStrategy,
    KMeansStrategy,
    StrategyCandidate,
    TuningResult,
)
from .config import ReductionConfig, get_config
from .exceptions import InvalidInputError, InvalidParameterError
from .utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

ALGORITHMS = ("dbscan", "adaptive-dbscan", "kmeans", "hierarchical", "affinity")
DEFAULT_ALGORITHMS = ("adaptive-dbscan", "kmeans", "hierarchical")


def build_candidates(algorithms: Sequence[str], seed: int) -> List[StrategyCandidate]:
    """Strategies with their default parameter grids, in the order requested."""
    grids = {
        "dbscan": StrategyCandidate(
            DBSCANStrategy(),
            {"epsilon": [0.1, 0.2, 0.3, 0.4, 0.5], "min_pts": [2, 3, 4]},
        ),
        "adaptive-dbscan": StrategyCandidate(AdaptiveDBSCANStrategy(), {}),
        "kmeans": StrategyCandidate(
            KMeansStrategy(),
            {"k": list(range(2, 9)), "seed": [seed]},
        ),
        "hierarchical": StrategyCandidate(
            HierarchicalStrategy(),
            {"num_clusters": list(range(2, 9)), "linkage": ["single", "complete", "average"]},
        ),
        "affinity": StrategyCandidate(
            AffinityPropagationStrategy(),
            {"damping": [0.5, 0.7, 0.9]},
        ),
    }
    return [grids[name] for name in algorithms]


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def result_to_dict(result: TuningResult) -> Dict[str, Any]:
    """JSON-serialisable view of a tuning result; non-finite metrics become null."""
    metrics = result.metrics
    return {
        "algorithm": result.algorithm_name,
        "params": result.params,
        "score": _finite_or_none(result.score),
        "metrics": {
            "silhouette": _finite_or_none(metrics.silhouette),
            "davies_bouldin": _finite_or_none(metrics.davies_bouldin),
            "num_clusters": metrics.num_clusters,
            "num_noise": metrics.num_noise,
            "cluster_sizes": list(metrics.cluster_sizes),
        },
        "labels": [int(label) for label in result.labels],
    }


def load_vectors(path: str) -> Any:
    """Load vectors from *path*, or from stdin when *path* is "-"."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="topic-clustering",
        description="Cluster embedding vectors and report the best-scoring configuration.",
    )
    parser.add_argument("input", help="JSON file with a list of vectors ('-' for stdin)")
    parser.add_argument(
        "--algorithms",
        nargs="+",
        choices=ALGORITHMS,
        default=list(DEFAULT_ALGORITHMS),
        help="Algorithms to compare (default: %(default)s)",
    )
    parser.add_argument(
        "--reduce",
        choices=("pca", "umap"),
        default=None,
        help="Reduce dimensionality before clustering",
    )
    parser.add_argument("--dims", type=int, default=None, help="Target dimensions for --reduce")
    parser.add_argument(
        "--target-clusters",
        type=int,
        default=None,
        help="Cluster count the score rewards (default: TOPIC_CLUSTERING_TARGET_CLUSTERS or 5)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Seed for K-Means (default: 42)")
    parser.add_argument("--workers", type=int, default=None, help="Evaluate combinations on N threads")
    parser.add_argument("--log-level", default=None, help="Override TOPIC_CLUSTERING_LOG_LEVEL")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        setup_logging(args.log_level)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    overrides: Dict[str, Any] = {}
    if args.target_clusters is not None:
        overrides["target_clusters"] = args.target_clusters
    if args.workers is not None:
        overrides["max_workers"] = args.workers

    try:
        if args.reduce:
            overrides["reduction"] = ReductionConfig(
                enabled=True, method=args.reduce, target_dimensions=args.dims
            )
        tuning = replace(get_config().tuning, **overrides)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        vectors = load_vectors(args.input)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Could not read vectors from %s: %s", args.input, e)
        return 1

    tuner = GridSearchTuner(tuning)
    try:
        best = tuner.compare_strategies(build_candidates(args.algorithms, args.seed), vectors)
    except (InvalidInputError, InvalidParameterError) as e:
        logger.error("Invalid input: %s", e)
        return 1

    if best is None:
        logger.warning("No clustering result (empty input or every configuration failed)")
        print(json.dumps(None))
        return 0

    print(json.dumps(result_to_dict(best), indent=2, allow_nan=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
