"""Decision function engine.

Evaluates every one-vs-one decision function of a model for one query.
Each support vector takes part in several pairwise comparisons, so the
kernel between the query and every support vector is computed exactly
once per query and shared by all pairs.
"""

import logging

import numpy as np
from numpy.typing import NDArray

from svm_toolkit.data_types import SparseVector
from svm_toolkit.kernel import KernelEvaluator
from svm_toolkit.model import TrainedModel

logger = logging.getLogger(__name__)


class DecisionFunctionEngine:
    """Computes signed decision values of a trained model.

    Args:
        model: The trained model to evaluate.

    Example:
        >>> engine = DecisionFunctionEngine(model)
        >>> engine.decision_values(query)  # one value per class pair
    """

    def __init__(self, model: TrainedModel) -> None:
        self.model = model
        self.kernel = KernelEvaluator(model.kernel)

    def kernel_row(self, query: SparseVector) -> NDArray[np.float64]:
        """Evaluate the kernel between the query and every support vector.

        Args:
            query: Sparse query vector.

        Returns:
            Array of shape [total_support_vectors].
        """
        return np.fromiter(
            (self.kernel.evaluate(sv, query) for sv in self.model.support_vectors),
            dtype=np.float64,
            count=self.model.total_support_vectors,
        )

    def decision_values(self, query: SparseVector) -> list[float]:
        """Compute the decision value of every pairwise decision function.

        For a classification model the result has one entry per class pair
        (i < j) in canonical order; positive values favour class i. For a
        regression or one-class model the result is the single decision
        value of the model.

        Args:
            query: Sparse query vector.

        Returns:
            List of decision values.
        """
        kvalue = self.kernel_row(query)
        coef = self.model.dual_coefficients

        if not self.model.is_classification:
            value = float(np.dot(coef[0], kvalue)) - self.model.rho[0]
            logger.debug("Decision value (%s): %f", self.model.svm_type, value)
            return [value]

        values: list[float] = []
        for s in self.model.pair_slices:
            total = np.dot(coef[s.row_i, s.start_i : s.end_i], kvalue[s.start_i : s.end_i])
            total += np.dot(coef[s.row_j, s.start_j : s.end_j], kvalue[s.start_j : s.end_j])
            values.append(float(total) - self.model.rho[s.pair_index])

        logger.debug("Decision values for %d class pairs: %s", len(values), values)
        return values
