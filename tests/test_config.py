"""Unit tests for the Config class and its Pydantic sections."""

import tempfile
from pathlib import Path
from typing import Any

import pytest
import yaml
from pydantic import ValidationError

from svm_toolkit.config import Config, InferenceConfig, ModelEntryConfig

REPO_ROOT = Path(__file__).resolve().parent.parent


def get_valid_paths() -> dict[str, str]:
    """Get a valid paths section."""
    return {
        "data_dir": "./data/",
        "data_models_dir": "./data/models/",
        "data_logs_dir": "./logs",
    }


def write_config(config_data: Any) -> Path:
    """Dump config_data to a temporary YAML file and return its path."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config_data, f)
        return Path(f.name)


class TestModelEntryConfig:
    """Test cases for the ModelEntryConfig Pydantic model."""

    def test_valid_entry(self) -> None:
        """Test that a valid model entry passes validation."""
        entry = ModelEntryConfig.model_validate({"name": "iris", "path": "iris.yaml", "description": "Iris species"})
        assert entry.name == "iris"
        assert entry.path == "iris.yaml"

    def test_missing_required_field(self) -> None:
        """Test that missing required fields raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            ModelEntryConfig.model_validate({"name": "iris"})
        error_fields = {error["loc"][0] for error in exc_info.value.errors()}
        assert error_fields == {"path", "description"}

    def test_extra_fields_forbidden(self) -> None:
        """Test that extra fields are forbidden due to extra='forbid'."""
        with pytest.raises(ValidationError) as exc_info:
            ModelEntryConfig.model_validate({"name": "iris", "path": "iris.yaml", "description": "", "gamma": 0.5})
        assert any("gamma" in str(error) for error in exc_info.value.errors())

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModelEntryConfig.model_validate({"name": "", "path": "iris.yaml", "description": ""})


class TestInferenceConfig:
    """Test cases for the InferenceConfig Pydantic model."""

    def test_defaults(self) -> None:
        """Test that defaults match the standard coupling settings."""
        config = InferenceConfig()
        assert config.min_probability == 1e-7
        assert config.coupling_min_iterations == 100
        assert config.coupling_tolerance == 0.005

    @pytest.mark.parametrize(
        "settings",
        [
            {"min_probability": 0.0},
            {"min_probability": 0.5},
            {"coupling_min_iterations": 0},
            {"coupling_tolerance": -1.0},
        ],
    )
    def test_out_of_range(self, settings: dict[str, float]) -> None:
        with pytest.raises(ValidationError):
            InferenceConfig.model_validate(settings)

    def test_frozen(self) -> None:
        config = InferenceConfig()
        with pytest.raises(ValidationError):
            config.min_probability = 0.1  # type: ignore[misc]


class TestConfig:
    """Test cases for the Config class."""

    def test_load_valid_config(self) -> None:
        """Test loading a valid configuration file."""
        config_data = {
            "paths": get_valid_paths(),
            "models": [
                {"name": "iris", "path": "iris.yaml", "description": "Iris species"},
                {"name": "housing", "path": "regression/housing.yaml", "description": "House prices"},
            ],
        }
        temp_path = write_config(config_data)

        try:
            config = Config(temp_path)
            models = config.get_models()
            assert len(models) == 2
            assert models[0].name == "iris"
            assert config.get_model(1).name == "housing"
            assert config.get_model_by_name("housing").path == "regression/housing.yaml"
            assert config.get_model_path("housing") == Path("./data/models/regression/housing.yaml")
            assert config.getConfigPath() == temp_path
            assert config.getDataDir() == Path("./data/")
            assert config.getDataLogsDir() == Path("./logs")
        finally:
            temp_path.unlink()

    def test_file_not_found(self) -> None:
        """Test that FileNotFoundError is raised when config file doesn't exist."""
        with pytest.raises(FileNotFoundError) as exc_info:
            Config(Path("/nonexistent/path/config.yaml"))
        assert "Config file not found" in str(exc_info.value)

    def test_invalid_yaml(self) -> None:
        """Test that invalid YAML raises yaml.YAMLError."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("invalid: yaml: content: [unclosed")
            temp_path = Path(f.name)

        try:
            with pytest.raises(yaml.YAMLError):
                Config(temp_path)
        finally:
            temp_path.unlink()

    def test_empty_file(self) -> None:
        """Test that an empty config file reports the missing 'models' key."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            temp_path = Path(f.name)

        try:
            with pytest.raises(KeyError) as exc_info:
                Config(temp_path)
            assert "Missing required key 'models'" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_missing_models_key(self) -> None:
        """Test that missing 'models' key raises KeyError."""
        temp_path = write_config({"paths": get_valid_paths()})

        try:
            with pytest.raises(KeyError) as exc_info:
                Config(temp_path)
            assert "Missing required key 'models'" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_missing_paths_key(self) -> None:
        """Test that missing 'paths' key raises KeyError."""
        temp_path = write_config({"models": []})

        try:
            with pytest.raises(KeyError) as exc_info:
                Config(temp_path)
            assert "Missing required key 'paths'" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_models_not_list(self) -> None:
        """Test that models not being a list raises ValueError."""
        temp_path = write_config({"paths": get_valid_paths(), "models": "not a list"})

        try:
            with pytest.raises(ValueError) as exc_info:
                Config(temp_path)
            assert "'models' must be a list" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_model_missing_required_field(self) -> None:
        """Test that a model entry missing required fields raises ValueError."""
        temp_path = write_config({"paths": get_valid_paths(), "models": [{"name": "iris"}]})

        try:
            with pytest.raises(ValueError) as exc_info:
                Config(temp_path)
            assert "Model validation failed" in str(exc_info.value)
            assert "iris" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_model_missing_name_field(self) -> None:
        """Test that an entry without a name uses its index in the error message."""
        temp_path = write_config({"paths": get_valid_paths(), "models": [{"path": "iris.yaml"}]})

        try:
            with pytest.raises(ValueError) as exc_info:
                Config(temp_path)
            assert "model at index 0" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_duplicate_model_names(self) -> None:
        entry = {"name": "iris", "path": "iris.yaml", "description": ""}
        temp_path = write_config({"paths": get_valid_paths(), "models": [entry, entry]})

        try:
            with pytest.raises(ValueError) as exc_info:
                Config(temp_path)
            assert "Duplicate model names: iris" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_invalid_paths(self) -> None:
        paths = get_valid_paths()
        paths["data_models_dir"] = ""
        temp_path = write_config({"paths": paths, "models": []})

        try:
            with pytest.raises(ValueError) as exc_info:
                Config(temp_path)
            assert "Paths configuration validation failed" in str(exc_info.value)
            assert "data_models_dir" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_inference_section_optional(self) -> None:
        temp_path = write_config({"paths": get_valid_paths(), "models": []})

        try:
            config = Config(temp_path)
            assert config.get_inference_config() == InferenceConfig()
        finally:
            temp_path.unlink()

    def test_inference_section_overrides(self) -> None:
        config_data = {
            "paths": get_valid_paths(),
            "models": [],
            "inference": {"min_probability": 1e-5, "coupling_min_iterations": 50},
        }
        temp_path = write_config(config_data)

        try:
            inference = Config(temp_path).get_inference_config()
            assert inference.min_probability == 1e-5
            assert inference.coupling_min_iterations == 50
            assert inference.coupling_tolerance == 0.005
        finally:
            temp_path.unlink()

    def test_invalid_inference_section(self) -> None:
        config_data = {"paths": get_valid_paths(), "models": [], "inference": {"coupling_tolerance": 0.0}}
        temp_path = write_config(config_data)

        try:
            with pytest.raises(ValueError) as exc_info:
                Config(temp_path)
            assert "Inference configuration validation failed" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_model_lookup_errors(self) -> None:
        temp_path = write_config({"paths": get_valid_paths(), "models": []})

        try:
            config = Config(temp_path)
            with pytest.raises(IndexError):
                config.get_model(0)
            with pytest.raises(KeyError) as exc_info:
                config.get_model_by_name("iris")
            assert "No model found with name: iris" in str(exc_info.value)
        finally:
            temp_path.unlink()

    def test_shipped_config_is_valid(self) -> None:
        """Test that the repository's config/config.yaml loads."""
        config = Config(REPO_ROOT / "config" / "config.yaml")
        assert config.get_model(0).name == "xor-rbf"
        assert config.get_inference_config() == InferenceConfig()
