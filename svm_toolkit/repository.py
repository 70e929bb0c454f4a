"""Model repositories: where trained models enter the inference engine.

Every repository validates the document it reads with build_model, so
inference never runs on a model that violates the structural invariants.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml

from svm_toolkit.errors import CorruptModel
from svm_toolkit.model import TrainedModel, build_model

logger = logging.getLogger(__name__)


class ModelRepository(Protocol):
    """Protocol for sources of trained models."""

    def load_model(self) -> TrainedModel:
        """Load and validate a trained model.

        Raises:
            CorruptModel: If the stored model violates a structural invariant.
        """
        ...


class MappingModelRepository:
    """Serves a model from an in-memory document mapping."""

    def __init__(self, document: Mapping[str, Any]) -> None:
        self._document = document

    def load_model(self) -> TrainedModel:
        return build_model(self._document)


class YamlModelRepository:
    """Loads a model document from a YAML (or JSON) file.

    Args:
        model_path: Path to the model document.

    Example:
        >>> repository = YamlModelRepository(config.get_model_path("iris"))
        >>> model = repository.load_model()
    """

    def __init__(self, model_path: str | Path) -> None:
        self.model_path = Path(model_path)

    def load_model(self) -> TrainedModel:
        """Read, validate and freeze the model document.

        Returns:
            The validated TrainedModel.

        Raises:
            FileNotFoundError: If the model file doesn't exist.
            CorruptModel: If the file is not valid YAML, is empty, or
                violates a structural invariant.
        """
        if not self.model_path.exists():
            raise FileNotFoundError(f"Model file not found: {self.model_path}")

        try:
            with open(self.model_path, encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CorruptModel(f"Model file is not valid YAML: {self.model_path}: {e}") from e

        if not isinstance(document, Mapping):
            raise CorruptModel(f"Model file does not contain a model document: {self.model_path}")

        model = build_model(document)
        logger.info(
            "Loaded model %s: svm_type=%s kernel=%s classes=%d support_vectors=%d",
            self.model_path,
            model.svm_type,
            model.kernel_type,
            model.class_count,
            model.total_support_vectors,
        )
        return model
