"""Labelled datasets used to evaluate trained models.

Supports construction from arrays and from svmlight, CSV and ARFF files.
All instances are stored as sparse vectors.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from svm_toolkit.data_types import SparseVector, as_sparse_vector, dense_to_sparse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Problem:
    """A labelled dataset.

    Attributes:
        labels: Label of each instance.
        instances: Sparse feature vector of each instance, same order.
    """

    labels: tuple[float, ...]
    instances: tuple[SparseVector, ...]

    @property
    def size(self) -> int:
        """Number of instances."""
        return len(self.instances)

    @property
    def num_features(self) -> int:
        """Highest feature index used by any instance, plus one."""
        return max((inst[-1].index + 1 for inst in self.instances if inst), default=0)

    @classmethod
    def from_array(cls, instances: Sequence[Sequence[float]], labels: Sequence[float]) -> "Problem":
        """Build a problem from dense instances and their labels.

        Args:
            instances: One dense feature list per instance.
            labels: One label per instance.

        Returns:
            Problem with feature indices 0..n-1.

        Raises:
            ValueError: If counts differ, there are no instances, or
                instances have different numbers of features.
        """
        if len(instances) != len(labels):
            raise ValueError("Number of instances must equal number of labels")
        if len(instances) == 0:
            raise ValueError("There must be at least one instance")
        if len({len(instance) for instance in instances}) != 1:
            raise ValueError("All instances must have the same size")

        return cls(
            labels=tuple(float(label) for label in labels),
            instances=tuple(dense_to_sparse(instance) for instance in instances),
        )

    @classmethod
    def from_svmlight(cls, path: str | Path) -> "Problem":
        """Read a problem in svmlight format ("label index:value ...").

        Blank lines are skipped and anything after '#' is ignored.

        Raises:
            ValueError: If a line is malformed.
        """
        labels: list[float] = []
        instances: list[SparseVector] = []
        for line_no, line in _read_lines(path):
            content = line.split("#", 1)[0].strip()
            if not content:
                continue
            tokens = content.split()
            try:
                labels.append(float(tokens[0]))
                pairs = []
                for feature in tokens[1:]:
                    index, value = feature.split(":")
                    pairs.append((int(index), float(value)))
                instances.append(as_sparse_vector(pairs))
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: malformed svmlight line: {e}") from e

        logger.info("Read %d instances from %s", len(instances), path)
        return cls(labels=tuple(labels), instances=tuple(instances))

    @classmethod
    def from_csv(cls, path: str | Path) -> "Problem":
        """Read a problem from CSV with the label in the first column.

        Raises:
            ValueError: If a value is not numeric.
        """
        labels: list[float] = []
        instances: list[SparseVector] = []
        for line_no, line in _read_lines(path):
            if not line.strip():
                continue
            tokens = line.strip().split(",")
            try:
                labels.append(float(tokens[0]))
                instances.append(dense_to_sparse([float(v) for v in tokens[1:]]))
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: malformed CSV line: {e}") from e

        logger.info("Read %d instances from %s", len(instances), path)
        return cls(labels=tuple(labels), instances=tuple(instances))

    @classmethod
    def from_arff(cls, path: str | Path) -> "Problem":
        """Read a problem from ARFF with the class in the last field.

        The header is skipped up to the @data line. Non-numeric feature
        values are read as 0.0; the label must be numeric.

        Raises:
            ValueError: If a label is not numeric.
        """
        labels: list[float] = []
        instances: list[SparseVector] = []
        found_data = False
        for line_no, line in _read_lines(path):
            stripped = line.strip()
            if not found_data:
                found_data = stripped.lower() == "@data"
                continue
            if not stripped or stripped.startswith("%"):
                continue
            tokens = stripped.split(",")
            try:
                labels.append(float(tokens[-1]))
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: non-numeric class value {tokens[-1]!r}") from e
            instances.append(dense_to_sparse([_float_or_zero(v) for v in tokens[:-1]]))

        logger.info("Read %d instances from %s", len(instances), path)
        return cls(labels=tuple(labels), instances=tuple(instances))

    def rescale(self, min_value: float = 0.0, max_value: float = 1.0) -> "Problem":
        """Return a copy with every feature column mapped onto [min_value, max_value].

        For SVM models, it is recommended all features be in range [0,1] or
        [-1,1]. Absent features count as zero; constant columns map to
        min_value. The result is dense over indices 0..num_features-1.
        """
        if self.size == 0:
            return self

        dense = np.zeros((self.size, self.num_features), dtype=np.float64)
        for row, instance in enumerate(self.instances):
            for node in instance:
                dense[row, node.index] = node.value

        col_min = dense.min(axis=0)
        span = dense.max(axis=0) - col_min
        varying = span > 0

        scaled = np.full_like(dense, min_value)
        scaled[:, varying] = (max_value - min_value) * (dense[:, varying] - col_min[varying]) / span[varying] + min_value

        return Problem(labels=self.labels, instances=tuple(dense_to_sparse(row) for row in scaled))

    def merge(self, other: "Problem") -> "Problem":
        """Return a problem holding this problem's instances followed by other's.

        Raises:
            ValueError: If the problems have different numbers of features.
        """
        if self.num_features != other.num_features:
            raise ValueError("Cannot merge two problems with different numbers of features")
        return Problem(labels=self.labels + other.labels, instances=self.instances + other.instances)


def _read_lines(path: str | Path) -> Iterator[tuple[int, str]]:
    with open(path, encoding="utf-8") as f:
        yield from enumerate(f, start=1)


def _float_or_zero(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return 0.0
