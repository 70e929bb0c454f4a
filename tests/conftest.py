"""Shared model documents for the inference tests."""

from typing import Any

import pytest


def get_three_class_document() -> dict[str, Any]:
    """Return a linear three-class model with one support vector per class.

    Support vector c has a single feature at index c. With rho = 0 the
    pairwise decision values are (k0 - k1, k0 - k2, k1 - k2) where kc is
    the query's value at index c.
    """
    return {
        "svm_type": "c_svc",
        "kernel": {"kernel_type": "linear"},
        "class_count": 3,
        "total_support_vectors": 3,
        "support_vectors": [[[0, 1.0]], [[1, 1.0]], [[2, 1.0]]],
        "dual_coefficients": [[1.0, -1.0, -1.0], [1.0, 1.0, -1.0]],
        "rho": [0.0, 0.0, 0.0],
        "class_labels": [10, 20, 30],
        "support_vector_counts": [1, 1, 1],
    }


def get_two_class_document() -> dict[str, Any]:
    """Return the linear two-class model with support vectors {0: 1.0} and {0: -1.0}."""
    return {
        "svm_type": "c_svc",
        "kernel": {"kernel_type": "linear"},
        "class_count": 2,
        "total_support_vectors": 2,
        "support_vectors": [[[0, 1.0]], [[0, -1.0]]],
        "dual_coefficients": [[1.0, 1.0]],
        "rho": [0.0],
        "class_labels": [1, 2],
        "support_vector_counts": [1, 1],
    }


def get_regression_document() -> dict[str, Any]:
    """Return a linear epsilon-SVR model: f(x) = 0.5 * (1.0 * x0) + 0.25 * (2.0 * x0) - 0.1 = x0 - 0.1."""
    return {
        "svm_type": "epsilon_svr",
        "kernel": {"kernel_type": "linear"},
        "class_count": 2,
        "total_support_vectors": 2,
        "support_vectors": [[[0, 1.0]], [[0, 2.0]]],
        "dual_coefficients": [[0.5, 0.25]],
        "rho": [0.1],
        "prob_a": [0.7],
        "prob_b": [0.0],
    }


@pytest.fixture
def three_class_document() -> dict[str, Any]:
    return get_three_class_document()


@pytest.fixture
def two_class_document() -> dict[str, Any]:
    return get_two_class_document()


@pytest.fixture
def regression_document() -> dict[str, Any]:
    return get_regression_document()
