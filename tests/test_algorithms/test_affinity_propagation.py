"""
Tests for Affinity Propagation.
"""

import numpy as np
import pytest

from topic_clustering.algorithms.affinity_propagation import (
    AffinityPropagationStrategy,
    affinity_propagation,
    assign_to_exemplars,
    similarity_matrix,
)
from topic_clustering.algorithms.distance import as_matrix, cosine_distance_matrix
from topic_clustering.exceptions import InvalidParameterError
from tests.conftest import assert_valid_labels


def test_similarity_matrix_default_preference(separated_vectors):
    S = similarity_matrix(separated_vectors)
    off_diagonal = -cosine_distance_matrix(separated_vectors)[~np.eye(9, dtype=bool)]
    np.testing.assert_allclose(np.diag(S), np.full(9, np.median(off_diagonal)))


def test_similarity_matrix_explicit_preference(separated_vectors):
    S = similarity_matrix(separated_vectors, preference=-0.25)
    np.testing.assert_array_equal(np.diag(S), np.full(9, -0.25))
    assert S[0, 3] == pytest.approx(-cosine_distance_matrix(separated_vectors)[0, 3])


def test_affinity_propagation_label_range(random_vectors):
    labels = AffinityPropagationStrategy().cluster(random_vectors)
    assert_valid_labels(labels, len(random_vectors), allow_noise=False)


def test_affinity_propagation_determinism(separated_vectors):
    first = AffinityPropagationStrategy().cluster(separated_vectors, {"damping": 0.7})
    second = AffinityPropagationStrategy().cluster(separated_vectors, {"damping": 0.7})
    np.testing.assert_array_equal(first, second)


def test_affinity_propagation_high_preference_every_point_exemplar(separated_vectors):
    labels = affinity_propagation(separated_vectors, preference=10.0)
    np.testing.assert_array_equal(labels, np.arange(9))


def test_affinity_propagation_no_exemplar_single_cluster():
    # A lone point with negative preference never becomes an exemplar
    labels = affinity_propagation(as_matrix([[1.0, 0.0]]), preference=-1.0)
    np.testing.assert_array_equal(labels, [0])


def test_affinity_propagation_single_point():
    np.testing.assert_array_equal(affinity_propagation(as_matrix([[1.0, 2.0]])), [0])


def test_affinity_propagation_empty():
    assert AffinityPropagationStrategy().cluster([]).shape == (0,)


def test_affinity_propagation_unknown_param(separated_vectors):
    with pytest.raises(InvalidParameterError):
        AffinityPropagationStrategy().cluster(separated_vectors, {"convergence_iter": 15})


def test_assign_to_exemplars_tie_goes_to_first_exemplar():
    X = as_matrix([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    S = similarity_matrix(X, preference=0.0)
    # [1, 1] is equally similar to both exemplars
    assert S[2, 0] == S[2, 1]
    np.testing.assert_array_equal(assign_to_exemplars(S, np.array([0, 1])), [0, 1, 0])
    np.testing.assert_array_equal(assign_to_exemplars(S, np.array([1, 0])), [1, 0, 0])
