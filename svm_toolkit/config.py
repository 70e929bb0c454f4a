"""Configuration loader for svm_toolkit."""

from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class InferenceConfig(BaseModel):
    """Numerical settings of the probability estimator."""

    min_probability: float = Field(1e-7, gt=0.0, lt=0.5, description="Clamp bound for pairwise probabilities")
    coupling_min_iterations: int = Field(100, gt=0, description="Lower bound of the coupling iteration cap")
    coupling_tolerance: float = Field(0.005, gt=0.0, description="Coupling stopping tolerance (divided by class count)")

    model_config = ConfigDict(frozen=True, extra="forbid")


class ModelEntryConfig(BaseModel):
    """Pydantic model for validating a registered trained model.

    All fields are required to ensure complete model entries.
    """

    name: str = Field(..., description="Name used to look the model up", min_length=1)
    path: str = Field(..., description="Model document path, relative to data_models_dir", min_length=1)
    description: str = Field(..., description="What the model predicts")

    model_config = ConfigDict(frozen=True, extra="forbid")


class PathsConfig(BaseModel):
    """Configuration for all project directory paths."""

    data_dir: str = Field(..., description="Root data directory path", min_length=1)
    data_models_dir: str = Field(..., description="Trained model documents directory path", min_length=1)
    data_logs_dir: str = Field(..., description="Logs directory path", min_length=1)

    model_config = ConfigDict(frozen=True, extra="forbid")


class Config:
    """Configuration class that loads and provides access to config.yaml."""

    def __init__(self, config_path: str | Path) -> None:
        """Initialize the Config by loading the YAML file.

        Args:
            config_path: Path to the config.yaml file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            yaml.YAMLError: If the YAML file is invalid.
            KeyError: If required keys are missing from the config.
            ValueError: If model entries, paths or inference settings are invalid.
        """
        self.config_path = Path(config_path)
        self._load(config_path)

        # Validate paths section (required)
        self._paths = self._validate_paths()

        # Inference section is optional, defaults match libsvm
        self._inference = self._validate_inference()

    def _load(self, config_path: str | Path) -> None:
        """Load the configuration from a YAML file.

        Args:
            config_path: Path to the config.yaml file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            yaml.YAMLError: If the YAML file is invalid.
            KeyError: If required keys are missing from the config.
            ValueError: If model entries are invalid or missing required fields.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            self._data = yaml.safe_load(f)

        # Handle empty or None YAML files
        if self._data is None:
            raise KeyError("Missing required key 'models' in config file")

        if "models" not in self._data:
            raise KeyError("Missing required key 'models' in config file")

        self._models = self._validate_models()

    def _validate_models(self) -> list[ModelEntryConfig]:
        """Validate and parse all model entries using Pydantic.

        Returns:
            List of validated ModelEntryConfig instances.

        Raises:
            ValueError: If any model entry is invalid or missing required fields.
        """
        models_raw = self._data["models"]
        if not isinstance(models_raw, list):
            raise ValueError("'models' must be a list")

        models = cast(list[dict[str, Any]], models_raw)

        validation_errors: list[str] = []
        validated_models: list[ModelEntryConfig] = []
        for idx, model_data in enumerate(models):
            try:
                validated_models.append(ModelEntryConfig.model_validate(model_data))
            except ValidationError as e:
                try:
                    model_name = model_data["name"]
                except (KeyError, TypeError):
                    model_name = f"model at index {idx}"
                error_messages = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
                validation_errors.append(f"Model '{model_name}' (index {idx}): {error_messages}")

        if validation_errors:
            error_msg = "Model validation failed:\n" + "\n".join(validation_errors)
            raise ValueError(error_msg)

        names = [entry.name for entry in validated_models]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate model names: {', '.join(duplicates)}")

        return validated_models

    def _validate_paths(self) -> PathsConfig:
        """Validate paths configuration.

        Returns:
            Validated PathsConfig instance.

        Raises:
            KeyError: If paths section is missing.
            ValueError: If paths configuration is invalid or contains empty paths.
        """
        if "paths" not in self._data:
            raise KeyError("Missing required key 'paths' in config file")

        try:
            return PathsConfig.model_validate(self._data["paths"])
        except ValidationError as e:
            error_messages = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
            raise ValueError(f"Paths configuration validation failed: {error_messages}") from e

    def _validate_inference(self) -> InferenceConfig:
        """Validate the optional inference section.

        Returns:
            InferenceConfig instance (defaults if the section is absent).

        Raises:
            ValueError: If the inference configuration is invalid.
        """
        try:
            return InferenceConfig.model_validate(self._data.get("inference") or {})
        except ValidationError as e:
            error_messages = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
            raise ValueError(f"Inference configuration validation failed: {error_messages}") from e

    def get_models(self) -> list[ModelEntryConfig]:
        """Get all registered model entries.

        Returns:
            List of ModelEntryConfig instances.
        """
        return self._models

    def get_model(self, index: int) -> ModelEntryConfig:
        """Get a specific model entry by index.

        Args:
            index: Zero-based index of the model entry.

        Returns:
            ModelEntryConfig instance.

        Raises:
            IndexError: If index is out of range.
        """
        if index < 0 or index >= len(self._models):
            raise IndexError(f"Model index {index} out of range (0-{len(self._models) - 1})")
        return self._models[index]

    def get_model_by_name(self, name: str) -> ModelEntryConfig:
        """Get a model entry by its name.

        Args:
            name: The name of the model.

        Returns:
            ModelEntryConfig instance.

        Raises:
            KeyError: If no model with the given name exists.
        """
        for entry in self._models:
            if entry.name == name:
                return entry
        raise KeyError(f"No model found with name: {name}")

    def get_model_path(self, name: str) -> Path:
        """Get the full path of a registered model document.

        Args:
            name: The name of the model.

        Returns:
            data_models_dir joined with the entry's path.
        """
        return self.getDataModelsDir() / self.get_model_by_name(name).path

    def get_inference_config(self) -> InferenceConfig:
        """Get probability estimator settings."""
        return self._inference

    def getConfigPath(self) -> Path:
        """Get the path to config.yaml."""
        return self.config_path

    def getDataDir(self) -> Path:
        """Get the data directory path.

        Returns:
            Path object pointing to the data directory (relative or absolute).
        """
        return Path(self._paths.data_dir)

    def getDataModelsDir(self) -> Path:
        """Get the trained models directory path.

        Returns:
            Path object pointing to the data/models directory.
        """
        return Path(self._paths.data_models_dir)

    def getDataLogsDir(self) -> Path:
        """Get the logs directory path.

        Returns:
            Path object pointing to the logs directory.
        """
        return Path(self._paths.data_logs_dir)
