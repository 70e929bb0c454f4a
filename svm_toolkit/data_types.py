"""Data types shared by the inference components.

Sparse feature vectors are tuples of FeatureNode, ordered by strictly
ascending, non-negative feature index. Absent indices are zero.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class FeatureNode:
    """One index/value pair of a sparse feature vector.

    Attributes:
        index: Feature index (non-negative, no upper bound).
        value: Feature value at that index.
    """

    index: int
    value: float


SparseVector = tuple[FeatureNode, ...]


@dataclass(frozen=True)
class PairwiseSlice:
    """Precomputed view of one one-vs-one decision function.

    Support vectors are grouped contiguously by class, so the support
    vectors of class i occupy [start_i, end_i) and those of class j
    occupy [start_j, end_j). The coefficients of class i's support vectors
    against class j live in dual coefficient row j - 1; those of class j's
    support vectors against class i live in row i.

    Attributes:
        pair_index: Position of the pair in canonical (i < j, nested) order.
        class_i: Internal index of the first class.
        class_j: Internal index of the second class.
        start_i: First support vector of class i.
        end_i: One past the last support vector of class i.
        start_j: First support vector of class j.
        end_j: One past the last support vector of class j.
        row_i: Dual coefficient row used for class i's support vectors.
        row_j: Dual coefficient row used for class j's support vectors.
    """

    pair_index: int
    class_i: int
    class_j: int
    start_i: int
    end_i: int
    start_j: int
    end_j: int
    row_i: int
    row_j: int


def as_sparse_vector(obj: SparseVector | Mapping[int, float] | Iterable[FeatureNode | tuple[int, float]]) -> SparseVector:
    """Normalise a query or support vector into a SparseVector.

    Args:
        obj: A SparseVector, a mapping {index: value}, or an iterable of
            FeatureNode or (index, value) pairs.

    Returns:
        Tuple of FeatureNode with strictly ascending indices.

    Raises:
        ValueError: If an index is negative, duplicated or out of order.
    """
    if isinstance(obj, Mapping):
        items: Iterable[FeatureNode | tuple[int, float]] = sorted(obj.items())
    else:
        items = obj

    nodes: list[FeatureNode] = []
    for item in items:
        if isinstance(item, FeatureNode):
            node = item
        else:
            index, value = item
            node = FeatureNode(index=int(index), value=float(value))

        if node.index < 0:
            raise ValueError(f"Feature index must be non-negative, got {node.index}")
        if nodes and node.index <= nodes[-1].index:
            raise ValueError(f"Feature indices must be strictly ascending: {nodes[-1].index} followed by {node.index}")
        nodes.append(node)

    return tuple(nodes)


def dense_to_sparse(values: Sequence[float]) -> SparseVector:
    """Convert a dense sequence into nodes indexed 0..n-1, keeping zeros."""
    return tuple(FeatureNode(index=i, value=float(v)) for i, v in enumerate(values))
