"""Performance measures for evaluating a model on a labelled dataset.

Every evaluator accumulates (actual, prediction) pairs through
add_result and reports a single value where higher is better.
"""

import math
from abc import ABC, abstractmethod


class Evaluator(ABC):
    """Base class for performance measures."""

    def __init__(self) -> None:
        self.total = 0
        self.correct = 0

    def add_result(self, actual: float, prediction: float) -> None:
        """Record one prediction against its true label."""
        self.total += 1
        if actual == prediction:
            self.correct += 1

    @property
    @abstractmethod
    def value(self) -> float:
        """Current value of the measure (higher is better)."""

    def better_than(self, other: "Evaluator | None") -> bool:
        """Return True if this result beats other (always True against None)."""
        if other is None:
            return True
        return self.value > other.value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(value={self.value:.4f}, n={self.total})"


class OverallAccuracy(Evaluator):
    """Percentage of correct predictions, 0.0 when empty."""

    @property
    def value(self) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 * self.correct / self.total


class GeometricMean(Evaluator):
    """Geometric mean of the recall of every class seen as an actual label."""

    def __init__(self) -> None:
        super().__init__()
        self._per_class: dict[float, list[int]] = {}

    def add_result(self, actual: float, prediction: float) -> None:
        super().add_result(actual, prediction)
        counts = self._per_class.setdefault(actual, [0, 0])
        counts[0] += 1
        if actual == prediction:
            counts[1] += 1

    @property
    def value(self) -> float:
        if not self._per_class:
            return 0.0
        recalls = [correct / seen for seen, correct in self._per_class.values()]
        return math.prod(recalls) ** (1.0 / len(recalls))


class ClassPrecision(Evaluator):
    """Fraction of predictions of one label that were correct.

    This is the standard definition: true positives over every prediction
    of the label. The Ruby svm_toolkit test suite expects the recall value
    under this name; that swap is not reproduced.

    Args:
        label: The class whose precision is measured.
    """

    def __init__(self, label: float) -> None:
        super().__init__()
        self.label = label
        self.predicted = 0
        self.true_positives = 0

    def add_result(self, actual: float, prediction: float) -> None:
        super().add_result(actual, prediction)
        if prediction == self.label:
            self.predicted += 1
            if actual == self.label:
                self.true_positives += 1

    @property
    def value(self) -> float:
        if self.predicted == 0:
            return 0.0
        return self.true_positives / self.predicted


class ClassRecall(Evaluator):
    """Fraction of instances of one label that were predicted as that label.

    This is the standard definition: true positives over every instance
    whose actual label is the label. The Ruby svm_toolkit test suite expects
    the precision value under this name; that swap is not reproduced.

    Args:
        label: The class whose recall is measured.
    """

    def __init__(self, label: float) -> None:
        super().__init__()
        self.label = label
        self.actual = 0
        self.true_positives = 0

    def add_result(self, actual: float, prediction: float) -> None:
        super().add_result(actual, prediction)
        if actual == self.label:
            self.actual += 1
            if prediction == self.label:
                self.true_positives += 1

    @property
    def value(self) -> float:
        if self.actual == 0:
            return 0.0
        return self.true_positives / self.actual
