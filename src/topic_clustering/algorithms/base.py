"""Clustering strategy protocol and helpers shared by the concrete algorithms."""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, runtime_checkable

import numpy as np

from .distance import VectorsIn
from ..exceptions import InvalidParameterError

NOISE = -1


@runtime_checkable
class ClusteringStrategy(Protocol):
    """Protocol for clustering algorithms.

    Implementations expose a display ``name`` and a pure ``cluster`` method
    mapping vectors to one integer label per vector (-1 for noise, otherwise
    contiguous cluster ids starting at 0).
    """

    name: str

    def cluster(
        self, vectors: VectorsIn, params: Optional[Mapping[str, Any]] = None
    ) -> np.ndarray:
        """Cluster vectors.

        Args:
            vectors: Input vectors of shape (n_samples, n_features)
            params: Algorithm-specific parameters

        Returns:
            Labels of shape (n_samples,)
        """
        ...


def check_params(
    params: Optional[Mapping[str, Any]], allowed: Iterable[str], strategy: str
) -> Dict[str, Any]:
    """Return *params* as a dict, rejecting keys the strategy does not know."""
    params = dict(params or {})
    unknown = sorted(set(params) - set(allowed))
    if unknown:
        raise InvalidParameterError(
            f"Unknown parameter(s) for {strategy}: {', '.join(unknown)}. "
            f"Allowed: {', '.join(sorted(allowed))}"
        )
    return params


def default_num_clusters(n: int) -> int:
    """Default cluster count ``max(2, floor(sqrt(n / 2)))``."""
    return max(2, int(math.floor(math.sqrt(n / 2))))


def empty_labels() -> np.ndarray:
    return np.empty(0, dtype=int)


def compact_labels(labels: np.ndarray, first_seen: bool = False) -> np.ndarray:
    """
    Renumber non-noise labels to 0..k-1.

    Args:
        labels: Raw labels (-1 for noise)
        first_seen: Number clusters by first appearance in *labels* instead
            of by ascending raw id

    Returns:
        New label array; noise stays -1
    """
    labels = np.asarray(labels, dtype=int)
    raw = labels[labels != NOISE].tolist()
    if first_seen:
        order = list(dict.fromkeys(raw))
    else:
        order = sorted(set(raw))
    mapping = {old: new for new, old in enumerate(order)}

    out = np.full(labels.shape, NOISE, dtype=int)
    for i, label in enumerate(labels.tolist()):
        if label != NOISE:
            out[i] = mapping[label]
    return out
