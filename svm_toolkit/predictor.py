"""Inference API over a trained SVM model.

This module provides the SvmPredictor class, which wires together the
decision function engine, voting and the probability estimator, and the
module-level functions decision_values, predict and predict_probabilities.
All operations are pure: they never modify the model and may run
concurrently against the same model.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import cast

import numpy as np

from svm_toolkit.config import InferenceConfig
from svm_toolkit.data_types import FeatureNode, SparseVector, as_sparse_vector
from svm_toolkit.decision import DecisionFunctionEngine
from svm_toolkit.errors import ProbabilityUnavailable
from svm_toolkit.evaluators import Evaluator, OverallAccuracy
from svm_toolkit.model import TrainedModel
from svm_toolkit.probability import ProbabilityEstimator
from svm_toolkit.problem import Problem
from svm_toolkit.repository import ModelRepository
from svm_toolkit.voting import vote

logger = logging.getLogger(__name__)

Query = SparseVector | Mapping[int, float] | Iterable[FeatureNode | tuple[int, float]]

REGRESSION_TYPES: set[str] = {"epsilon_svr", "nu_svr"}


class SvmPredictor:
    """Runs decision, prediction and probability inference for one model.

    Prediction depends on the model type:
    - c_svc / nu_svc: one-vs-one voting, mapped back to the class label
    - one_class: +1 if the decision value is positive, else -1
    - epsilon_svr / nu_svr: the decision value itself

    Args:
        model: The trained model.
        inference_config: Probability estimator settings (defaults if None).

    Example:
        >>> predictor = SvmPredictor(model)
        >>> predictor.predict({0: 0.5, 3: -1.2})
        >>> predictor.predict_probabilities({0: 0.5, 3: -1.2})
    """

    def __init__(self, model: TrainedModel, inference_config: InferenceConfig | None = None) -> None:
        config = inference_config or InferenceConfig()
        self.model = model
        self.engine = DecisionFunctionEngine(model)
        self.estimator = ProbabilityEstimator(
            min_probability=config.min_probability,
            coupling_min_iterations=config.coupling_min_iterations,
            coupling_tolerance=config.coupling_tolerance,
        )

    @classmethod
    def from_repository(cls, repository: ModelRepository, inference_config: InferenceConfig | None = None) -> "SvmPredictor":
        """Load a model from a repository and wrap it in a predictor."""
        return cls(repository.load_model(), inference_config)

    def decision_values(self, query: Query) -> list[float]:
        """Compute one decision value per class pair (one for regression/one-class).

        Raises:
            ValueError: If the query is not a valid sparse vector.
            InvalidKernelConfig: If the model's kernel type is unknown.
        """
        return self.engine.decision_values(as_sparse_vector(query))

    def predict_values(self, query: Query) -> float | list[float]:
        """Return the decision value if the model has one boundary, else the list."""
        values = self.decision_values(query)
        if len(values) == 1:
            return values[0]
        return values

    def predict(self, query: Query) -> int | float:
        """Predict the label (classification), sign (one-class) or value (regression)."""
        values = self.decision_values(query)

        if self.model.svm_type in REGRESSION_TYPES:
            return values[0]
        if self.model.svm_type == "one_class":
            return 1 if values[0] > 0 else -1

        labels = cast(tuple[int, ...], self.model.class_labels)
        return labels[vote(self.model, values)]

    def predict_probabilities(self, query: Query) -> list[float]:
        """Estimate the probability of each class, in class_labels order.

        Raises:
            ProbabilityUnavailable: If the model has no calibration parameters
                or is not a classification model.
        """
        self.estimator.ensure_available(self.model)
        values = self.decision_values(query)
        return self.estimator.estimate(self.model, values)

    def predict_with_probabilities(self, query: Query) -> tuple[int, list[float]]:
        """Return the most probable label together with all class probabilities.

        Ties go to the lowest internal class index.
        """
        probabilities = self.predict_probabilities(query)
        labels = cast(tuple[int, ...], self.model.class_labels)
        return labels[int(np.argmax(probabilities))], probabilities

    def svr_probability(self) -> float:
        """Return the Laplace scale parameter of a calibrated regression model.

        Raises:
            ProbabilityUnavailable: If the model is not a calibrated regression model.
        """
        if self.model.svm_type not in REGRESSION_TYPES or self.model.prob_a is None:
            raise ProbabilityUnavailable("Model has no regression probability information")
        return self.model.prob_a[0]

    def evaluate_dataset(self, problem: Problem, evaluator: Evaluator | None = None, log_results: bool = False) -> Evaluator:
        """Predict every instance of a problem and score the predictions.

        Args:
            problem: Labelled instances to evaluate on.
            evaluator: Measure to fill (OverallAccuracy if None).
            log_results: Log each instance's prediction at INFO level.

        Returns:
            The evaluator holding every (label, prediction) result.
        """
        performance = evaluator if evaluator is not None else OverallAccuracy()
        for i, (label, instance) in enumerate(zip(problem.labels, problem.instances, strict=True)):
            prediction = self.predict(instance)
            performance.add_result(label, prediction)
            if log_results:
                logger.info("Instance %d, Prediction: %s, True label: %s", i, prediction, label)

        logger.info("Evaluated %d instances: %r", problem.size, performance)
        return performance


def decision_values(model: TrainedModel, query: Query) -> list[float]:
    """Compute the pairwise decision values of model for query."""
    return SvmPredictor(model).decision_values(query)


def predict(model: TrainedModel, query: Query) -> int | float:
    """Predict the label (or value, for regression) of query."""
    return SvmPredictor(model).predict(query)


def predict_probabilities(model: TrainedModel, query: Query) -> list[float]:
    """Estimate class probabilities of query under a calibrated model."""
    return SvmPredictor(model).predict_probabilities(query)
