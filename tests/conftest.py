"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import logging

import numpy as np
import pytest

from topic_clustering.utils.logging_config import PACKAGE_LOGGER_NAME


@pytest.fixture
def separated_vectors():
    """
    Nine 3-D vectors in three tight groups along the coordinate axes.

    Indices 0-2 point along x, 3-5 along y, 6-8 along z, so any sensible
    cosine-based clustering recovers the groups.
    """
    return np.array(
        [
            [1.0, 0.05, 0.0],
            [0.95, 0.0, 0.05],
            [1.0, 0.02, 0.02],
            [0.0, 1.0, 0.05],
            [0.05, 0.95, 0.0],
            [0.02, 1.0, 0.02],
            [0.05, 0.0, 1.0],
            [0.0, 0.05, 0.95],
            [0.02, 0.02, 1.0],
        ]
    )


@pytest.fixture
def separated_groups():
    """Ground-truth grouping of ``separated_vectors``."""
    return [[0, 1, 2], [3, 4, 5], [6, 7, 8]]


@pytest.fixture
def dbscan_example():
    """Two pairs of near-parallel 2-D vectors plus a zero vector."""
    return [[1.0, 0.0], [0.9, 0.1], [0.0, 1.0], [0.1, 0.9], [0.0, 0.0]]


@pytest.fixture
def random_vectors():
    """Thirty reproducible 8-D Gaussian vectors."""
    rng = np.random.default_rng(42)
    return rng.standard_normal((30, 8))


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers setup_logging attached so tests don't leak them."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_topic_clustering_handler", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def assert_valid_labels(labels, n, allow_noise=True):
    """Labels are -1 or contiguous ids from 0."""
    labels = np.asarray(labels)
    assert labels.shape == (n,)
    clustered = sorted(set(labels[labels != -1].tolist()))
    assert clustered == list(range(len(clustered)))
    if not allow_noise:
        assert -1 not in labels.tolist()


def assert_same_partition(labels, groups):
    """Every group shares one label and different groups have different labels."""
    labels = np.asarray(labels)
    group_labels = []
    for group in groups:
        values = set(labels[group].tolist())
        assert len(values) == 1, f"group {group} split across {values}"
        group_labels.append(values.pop())
    assert len(set(group_labels)) == len(groups)
