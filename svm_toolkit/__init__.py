"""Inference over trained support vector machine models."""

from svm_toolkit.data_types import FeatureNode, SparseVector, as_sparse_vector, dense_to_sparse
from svm_toolkit.errors import CorruptModel, InvalidKernelConfig, ProbabilityUnavailable
from svm_toolkit.model import TrainedModel, build_model
from svm_toolkit.predictor import SvmPredictor, decision_values, predict, predict_probabilities
from svm_toolkit.repository import MappingModelRepository, ModelRepository, YamlModelRepository

__all__ = [
    "CorruptModel",
    "FeatureNode",
    "InvalidKernelConfig",
    "MappingModelRepository",
    "ModelRepository",
    "ProbabilityUnavailable",
    "SparseVector",
    "SvmPredictor",
    "TrainedModel",
    "YamlModelRepository",
    "as_sparse_vector",
    "build_model",
    "decision_values",
    "dense_to_sparse",
    "predict",
    "predict_probabilities",
]
