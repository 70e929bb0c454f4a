"""Kernel evaluation over sparse feature vectors.

Both vectors are walked in ascending index order (two-pointer merge),
so no dense vector is ever materialised.
"""

import bisect
import math

import numpy as np

from svm_toolkit.data_types import SparseVector
from svm_toolkit.errors import InvalidKernelConfig
from svm_toolkit.schemas import KernelParameters


def dot(a: SparseVector, b: SparseVector) -> float:
    """Sparse dot product; indices absent on either side contribute zero."""
    total = 0.0
    i = 0
    j = 0
    while i < len(a) and j < len(b):
        if a[i].index == b[j].index:
            total += a[i].value * b[j].value
            i += 1
            j += 1
        elif a[i].index > b[j].index:
            j += 1
        else:
            i += 1
    return total


def squared_distance(a: SparseVector, b: SparseVector) -> float:
    """Squared Euclidean distance between two sparse vectors."""
    total = 0.0
    i = 0
    j = 0
    while i < len(a) and j < len(b):
        if a[i].index == b[j].index:
            d = a[i].value - b[j].value
            total += d * d
            i += 1
            j += 1
        elif a[i].index > b[j].index:
            total += b[j].value * b[j].value
            j += 1
        else:
            total += a[i].value * a[i].value
            i += 1

    while i < len(a):
        total += a[i].value * a[i].value
        i += 1
    while j < len(b):
        total += b[j].value * b[j].value
        j += 1

    return total


def precomputed_lookup(a: SparseVector, b: SparseVector) -> float:
    """Return the precomputed kernel value for support vector a and query b.

    The first node of a holds the support vector's serial number s; b is
    the query's row of the precomputed kernel matrix, and the result is
    its value at index s (0.0 if that index is absent).
    """
    serial = int(a[0].value)
    pos = bisect.bisect_left(b, serial, key=lambda node: node.index)
    if pos < len(b) and b[pos].index == serial:
        return b[pos].value
    return 0.0


class KernelEvaluator:
    """Computes kernel similarity under a model's kernel configuration.

    Supported kernel types:
    - "linear": dot(a, b)
    - "polynomial": (gamma * dot(a, b) + coef0) ** degree
    - "rbf": exp(-gamma * |a - b|^2)
    - "sigmoid": tanh(gamma * dot(a, b) + coef0)
    - "precomputed": value looked up in the query's kernel row

    Args:
        kernel: Kernel parameters of the trained model.

    Example:
        >>> evaluator = KernelEvaluator(KernelParameters(kernel_type="rbf", gamma=0.5))
        >>> evaluator.evaluate(support_vector, query)
    """

    VALID_KERNELS: set[str] = {"linear", "polynomial", "rbf", "sigmoid", "precomputed"}

    def __init__(self, kernel: KernelParameters) -> None:
        self.kernel = kernel

    def evaluate(self, a: SparseVector, b: SparseVector) -> float:
        """Evaluate the kernel between two sparse vectors.

        Args:
            a: First vector (the support vector for precomputed kernels).
            b: Second vector (the query for precomputed kernels).

        Returns:
            Kernel value.

        Raises:
            InvalidKernelConfig: If the configured kernel type is unknown.
        """
        kernel_type = self.kernel.kernel_type
        if kernel_type == "linear":
            return dot(a, b)
        if kernel_type == "polynomial":
            # Overflow saturates to +/-inf
            with np.errstate(over="ignore"):
                return float(np.float64(self.kernel.gamma * dot(a, b) + self.kernel.coef0) ** self.kernel.degree)
        if kernel_type == "rbf":
            return math.exp(-self.kernel.gamma * squared_distance(a, b))
        if kernel_type == "sigmoid":
            return math.tanh(self.kernel.gamma * dot(a, b) + self.kernel.coef0)
        if kernel_type == "precomputed":
            return precomputed_lookup(a, b)
        raise InvalidKernelConfig(kernel_type, self.VALID_KERNELS)
