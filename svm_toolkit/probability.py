"""Probability estimation for calibrated classification models.

Two stages:
1. Each pairwise decision value is mapped to a probability through the
   sigmoid 1 / (1 + exp(A * f + B)) fitted at training time (Platt
   scaling), clamped away from 0 and 1.
2. The pairwise probabilities are coupled into one distribution over all
   classes with the second-order fixed-point method of Wu, Lin and Weng
   (2004), which minimises

       sum_i sum_{j != i} (r[j][i] * p[i] - r[i][j] * p[j]) ** 2

   subject to sum(p) == 1.
"""

import logging
import math
from collections.abc import Sequence
from typing import cast

import numpy as np
from numpy.typing import NDArray

from svm_toolkit.data_types import PairwiseSlice
from svm_toolkit.errors import ProbabilityUnavailable
from svm_toolkit.model import TrainedModel

logger = logging.getLogger(__name__)

_MIN_SCALE = 1e-12


def sigmoid_predict(decision_value: float, a: float, b: float) -> float:
    """Platt sigmoid 1 / (1 + exp(a * decision_value + b)).

    Evaluated in the form that never overflows exp().
    """
    f_apb = decision_value * a + b
    if f_apb >= 0:
        return math.exp(-f_apb) / (1.0 + math.exp(-f_apb))
    return 1.0 / (1.0 + math.exp(f_apb))


class ProbabilityEstimator:
    """Maps pairwise decision values to a calibrated class distribution.

    Args:
        min_probability: Clamp bound for pairwise probabilities; each lies
                         in [min_probability, 1 - min_probability].
        coupling_min_iterations: Lower bound of the coupling iteration cap;
                                 the cap is max(this, class_count).
        coupling_tolerance: Stopping tolerance, divided by class_count.

    Example:
        >>> estimator = ProbabilityEstimator()
        >>> estimator.estimate(model, decision_values)  # [0.7, 0.2, 0.1]
    """

    def __init__(
        self,
        min_probability: float = 1e-7,
        coupling_min_iterations: int = 100,
        coupling_tolerance: float = 0.005,
    ) -> None:
        self.min_probability = min_probability
        self.coupling_min_iterations = coupling_min_iterations
        self.coupling_tolerance = coupling_tolerance

    def estimate(self, model: TrainedModel, decision_values: Sequence[float]) -> list[float]:
        """Estimate class probabilities from the model's pairwise decision values.

        Args:
            model: Classification model with calibration parameters.
            decision_values: One decision value per class pair, canonical order.

        Returns:
            Probability of each internal class index; entries in [0, 1]
            summing to 1.

        Raises:
            ProbabilityUnavailable: If the model is not a classification
                model or has no prob_a/prob_b.
        """
        self.ensure_available(model)
        prob_a = cast(tuple[float, ...], model.prob_a)
        prob_b = cast(tuple[float, ...], model.prob_b)

        if model.class_count == 1:
            return [1.0]

        r = self.pairwise_probabilities(decision_values, model.pair_slices, prob_a, prob_b, model.class_count)
        return [float(p) for p in self.couple(r)]

    def ensure_available(self, model: TrainedModel) -> None:
        """Raise ProbabilityUnavailable unless the model supports class probabilities."""
        if not model.is_classification:
            raise ProbabilityUnavailable(f"Class probabilities are not defined for {model.svm_type} models")
        if not model.has_probability_model:
            raise ProbabilityUnavailable("Model has no probability calibration parameters (prob_a/prob_b)")

    def pairwise_probabilities(
        self,
        decision_values: Sequence[float],
        pair_slices: Sequence[PairwiseSlice],
        prob_a: Sequence[float],
        prob_b: Sequence[float],
        class_count: int,
    ) -> NDArray[np.float64]:
        """Build the matrix r of pairwise class probabilities.

        r[i][j] estimates P(class i | class i or j, query), and
        r[j][i] = 1 - r[i][j]. The diagonal is zero.

        Returns:
            Array of shape [class_count, class_count].
        """
        r = np.zeros((class_count, class_count), dtype=np.float64)
        for pair, value in zip(pair_slices, decision_values, strict=True):
            p = pair.pair_index
            prob = sigmoid_predict(value, prob_a[p], prob_b[p])
            prob = min(max(prob, self.min_probability), 1.0 - self.min_probability)
            r[pair.class_i, pair.class_j] = prob
            r[pair.class_j, pair.class_i] = 1.0 - prob
        return r

    def couple(self, r: NDArray[np.float64]) -> NDArray[np.float64]:
        """Couple pairwise probabilities into a single distribution.

        Args:
            r: Pairwise probability matrix from pairwise_probabilities.

        Returns:
            Array of shape [class_count] with entries in [0, 1] summing to 1.
        """
        k = r.shape[0]
        if k == 1:
            return np.ones(1, dtype=np.float64)

        max_iter = max(self.coupling_min_iterations, k)
        eps = self.coupling_tolerance / k

        # Q[t][t] = sum_{j != t} r[j][t]^2, Q[t][j] = -r[j][t] * r[t][j]
        q = -r.T * r
        np.fill_diagonal(q, np.sum(r * r, axis=0))

        p = np.full(k, 1.0 / k, dtype=np.float64)
        for _ in range(max_iter):
            qp = q @ p
            pqp = float(p @ qp)
            max_error = float(np.max(np.abs(qp - pqp)))
            if max_error < eps:
                break

            for t in range(k):
                if q[t, t] <= 0.0:
                    continue
                diff = (-qp[t] + pqp) / q[t, t]
                scale = 1.0 + diff
                if abs(scale) < _MIN_SCALE:
                    continue
                p[t] += diff
                pqp = (pqp + diff * (diff * q[t, t] + 2.0 * qp[t])) / scale / scale
                qp = (qp + diff * q[t]) / scale
                p /= scale
        else:
            logger.warning("Pairwise coupling reached the iteration cap (%d) for %d classes", max_iter, k)

        return self._normalise(p)

    def _normalise(self, p: NDArray[np.float64]) -> NDArray[np.float64]:
        """Clip to [0, 1] and rescale to sum 1, uniform if the mass collapsed."""
        k = len(p)
        if not np.all(np.isfinite(p)):
            logger.warning("Pairwise coupling produced non-finite probabilities, falling back to uniform")
            return np.full(k, 1.0 / k, dtype=np.float64)

        clipped = np.clip(p, 0.0, 1.0)
        total = float(np.sum(clipped))
        if total <= 0.0:
            return np.full(k, 1.0 / k, dtype=np.float64)
        return clipped / total
