"""
Tests for DBSCAN and Adaptive DBSCAN.
"""

import numpy as np
import pytest

from topic_clustering.algorithms.base import ClusteringStrategy
from topic_clustering.algorithms.dbscan import (
    AdaptiveDBSCANStrategy,
    DBSCANStrategy,
    dbscan,
    heuristic_score,
)
from topic_clustering.exceptions import InvalidInputError, InvalidParameterError
from tests.conftest import assert_same_partition, assert_valid_labels


# ------------------------------------------------------------------
# dbscan
# ------------------------------------------------------------------


def test_dbscan_pairs_and_zero_vector(dbscan_example):
    labels = dbscan(dbscan_example, epsilon=0.05, min_pts=2)

    assert labels[0] == labels[1]
    assert labels[2] == labels[3]
    assert labels[0] != labels[2]
    assert labels[4] == -1
    # Cluster ids follow the order clusters are discovered
    np.testing.assert_array_equal(labels, [0, 0, 1, 1, -1])


def test_dbscan_all_noise_when_min_pts_too_large(dbscan_example):
    labels = dbscan(dbscan_example, epsilon=0.05, min_pts=3)
    np.testing.assert_array_equal(labels, [-1] * 5)


def test_dbscan_epsilon_is_inclusive():
    labels = dbscan([[1.0, 0.0], [1.0, 0.0]], epsilon=0.0, min_pts=2)
    np.testing.assert_array_equal(labels, [0, 0])


def test_dbscan_border_point_joins_cluster():
    """A noise point reachable from a later core point becomes a border point."""
    # 0 is not core (only 1 within reach of it); 1 is core and absorbs 0
    vectors = [[1.0, 0.2], [1.0, 0.0], [1.0, -0.01], [0.0, 1.0]]
    labels = dbscan(vectors, epsilon=0.021, min_pts=3)
    assert labels[1] == labels[2]
    assert labels[0] == labels[1]
    assert labels[3] == -1


def test_dbscan_separated(separated_vectors, separated_groups):
    labels = dbscan(separated_vectors, epsilon=0.1, min_pts=2)
    assert_valid_labels(labels, 9)
    assert_same_partition(labels, separated_groups)


def test_dbscan_empty():
    labels = dbscan([])
    assert labels.shape == (0,)


def test_dbscan_inconsistent_dimensions():
    with pytest.raises(InvalidInputError):
        dbscan([[1.0, 0.0], [1.0]])


@pytest.mark.parametrize(
    "epsilon, min_pts, match",
    [(0.1, 0, "min_pts"), (0.1, -2, "min_pts"), (-0.1, 2, "epsilon")],
)
def test_dbscan_rejects_invalid_params(epsilon, min_pts, match):
    with pytest.raises(InvalidParameterError, match=match):
        dbscan([[0.0, 0.0], [1.0, 0.0]], epsilon=epsilon, min_pts=min_pts)


def test_strategies_reject_invalid_density_params(dbscan_example):
    with pytest.raises(InvalidParameterError, match="min_pts"):
        DBSCANStrategy().cluster(dbscan_example, {"min_pts": 0})
    with pytest.raises(InvalidParameterError, match="epsilon"):
        AdaptiveDBSCANStrategy().cluster(dbscan_example, {"epsilon": -1.0, "min_pts": 2})


# ------------------------------------------------------------------
# heuristic_score
# ------------------------------------------------------------------


def test_heuristic_score_all_noise():
    assert heuristic_score(np.array([-1, -1, -1]), 3) == -1.0


def test_heuristic_score_ideal():
    # sqrt(4) == 2 clusters and no noise
    assert heuristic_score(np.array([0, 0, 1, 1]), 4) == pytest.approx(1.0)


def test_heuristic_score_penalises_noise():
    clean = heuristic_score(np.array([0, 0, 1, 1]), 4)
    noisy = heuristic_score(np.array([0, -1, 1, 1]), 4)
    assert noisy < clean


# ------------------------------------------------------------------
# Strategies
# ------------------------------------------------------------------


def test_strategies_satisfy_protocol():
    assert isinstance(DBSCANStrategy(), ClusteringStrategy)
    assert isinstance(AdaptiveDBSCANStrategy(), ClusteringStrategy)
    assert DBSCANStrategy().name == "DBSCAN"
    assert AdaptiveDBSCANStrategy().name == "Adaptive DBSCAN"


def test_dbscan_strategy_defaults(dbscan_example):
    labels = DBSCANStrategy().cluster(dbscan_example)
    np.testing.assert_array_equal(labels, [0, 0, 1, 1, -1])


def test_dbscan_strategy_params(dbscan_example):
    labels = DBSCANStrategy().cluster(dbscan_example, {"epsilon": 0.05, "min_pts": 3})
    np.testing.assert_array_equal(labels, [-1] * 5)


def test_dbscan_strategy_unknown_param(dbscan_example):
    with pytest.raises(InvalidParameterError, match="eps"):
        DBSCANStrategy().cluster(dbscan_example, {"eps": 0.1})


def test_adaptive_finds_groups(separated_vectors):
    labels = AdaptiveDBSCANStrategy().cluster(separated_vectors)
    np.testing.assert_array_equal(labels, [0, 0, 0, 1, 1, 1, 2, 2, 2])


def test_adaptive_both_params_skip_sweep(dbscan_example):
    params = {"epsilon": 0.05, "min_pts": 2}
    labels = AdaptiveDBSCANStrategy().cluster(dbscan_example, params)
    np.testing.assert_array_equal(labels, dbscan(dbscan_example, 0.05, 2))


def test_adaptive_auto_tune_off_uses_defaults(random_vectors):
    labels = AdaptiveDBSCANStrategy().cluster(random_vectors, {"auto_tune": False})
    np.testing.assert_array_equal(labels, dbscan(random_vectors))


def test_adaptive_pinned_min_pts(separated_vectors):
    labels = AdaptiveDBSCANStrategy().cluster(separated_vectors, {"min_pts": 3})
    assert_valid_labels(labels, 9)
    np.testing.assert_array_equal(labels, [0, 0, 0, 1, 1, 1, 2, 2, 2])


def test_adaptive_all_noise_fallback(dbscan_example):
    labels = AdaptiveDBSCANStrategy().cluster(dbscan_example, {"min_pts": 20})
    np.testing.assert_array_equal(labels, [-1] * 5)


def test_adaptive_custom_grid(dbscan_example):
    strategy = AdaptiveDBSCANStrategy(epsilon_grid=[0.05], min_pts_grid=[2])
    labels = strategy.cluster(dbscan_example)
    np.testing.assert_array_equal(labels, [0, 0, 1, 1, -1])


def test_adaptive_single_point_and_empty():
    np.testing.assert_array_equal(AdaptiveDBSCANStrategy().cluster([[1.0, 0.0]]), [0])
    assert AdaptiveDBSCANStrategy().cluster([]).shape == (0,)
