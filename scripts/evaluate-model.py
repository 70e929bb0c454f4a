#!/usr/bin/env python3
"""Evaluate a registered SVM model on a labelled dataset.

Loads the model named in config/config.yaml, predicts every instance of
the dataset and reports the chosen performance measure.

Usage:
    uv run python scripts/evaluate-model.py xor-rbf data/xor.svm
    uv run python scripts/evaluate-model.py xor-rbf data/xor.csv --format csv --measure recall --label 1
    uv run python scripts/evaluate-model.py xor-rbf data/xor.svm --rescale -1 1 --log-results
"""

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

import yaml

from svm_toolkit.config import Config
from svm_toolkit.evaluators import ClassPrecision, ClassRecall, Evaluator, GeometricMean, OverallAccuracy
from svm_toolkit.predictor import SvmPredictor
from svm_toolkit.problem import Problem
from svm_toolkit.repository import YamlModelRepository

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).parent.parent

READERS: dict[str, Callable[[Path], Problem]] = {
    "svmlight": Problem.from_svmlight,
    "csv": Problem.from_csv,
    "arff": Problem.from_arff,
}

MEASURES = ("accuracy", "geometric-mean", "precision", "recall")


def load_problem(dataset_path: Path, data_format: str) -> Problem:
    """Read a dataset in one of the supported formats.

    Raises:
        ValueError: If the format is unknown or the file is malformed.
    """
    if data_format not in READERS:
        raise ValueError(f"Unknown dataset format: '{data_format}'. Supported: {', '.join(sorted(READERS))}")
    return READERS[data_format](dataset_path)


def build_measure(measure: str, label: float | None = None) -> Evaluator:
    """Create the evaluator for a measure name.

    Raises:
        ValueError: If the measure is unknown, or is per-class and no label is given.
    """
    if measure == "accuracy":
        return OverallAccuracy()
    if measure == "geometric-mean":
        return GeometricMean()
    if measure in ("precision", "recall"):
        if label is None:
            raise ValueError(f"The {measure} measure needs --label")
        return ClassPrecision(label) if measure == "precision" else ClassRecall(label)
    raise ValueError(f"Unknown measure: '{measure}'. Supported: {', '.join(MEASURES)}")


def evaluate_model(
    config: Config,
    model_name: str,
    problem: Problem,
    evaluator: Evaluator,
    log_results: bool = False,
) -> Evaluator:
    """Load a registered model and score it on a problem.

    Args:
        config: Loaded project configuration.
        model_name: Name of the model entry in config.yaml.
        problem: Labelled instances.
        evaluator: Measure to fill.
        log_results: Log every prediction.

    Returns:
        The filled evaluator.
    """
    model_path = REPO_ROOT / config.get_model_path(model_name)
    predictor = SvmPredictor.from_repository(YamlModelRepository(model_path), config.get_inference_config())
    return predictor.evaluate_dataset(problem, evaluator, log_results=log_results)


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    parser = argparse.ArgumentParser(description="Evaluate a registered SVM model on a labelled dataset")
    parser.add_argument("model", help="Model name from config/config.yaml")
    parser.add_argument("dataset", type=Path, help="Path to the labelled dataset")
    parser.add_argument("--format", dest="data_format", choices=sorted(READERS), default="svmlight")
    parser.add_argument("--measure", choices=MEASURES, default="accuracy")
    parser.add_argument("--label", type=float, help="Class label for the precision and recall measures")
    parser.add_argument("--rescale", nargs=2, type=float, metavar=("MIN", "MAX"), help="Rescale features first")
    parser.add_argument("--log-results", action="store_true", help="Log every prediction")
    parser.add_argument("--config", type=Path, default=REPO_ROOT / "config" / "config.yaml")
    args = parser.parse_args()

    logger.info("Loading configuration from %s", args.config)
    try:
        config = Config(args.config)
    except (FileNotFoundError, KeyError, ValueError, yaml.YAMLError) as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1

    try:
        evaluator = build_measure(args.measure, args.label)
        problem = load_problem(args.dataset, args.data_format)
        if args.rescale:
            problem = problem.rescale(*args.rescale)
        result = evaluate_model(config, args.model, problem, evaluator, log_results=args.log_results)
    except (FileNotFoundError, KeyError, ValueError) as exc:
        logger.error("Evaluation failed: %s", exc)
        return 1

    print(f"{args.model}: {args.measure} = {result.value:.4f} over {result.total} instances")
    return 0


if __name__ == "__main__":
    sys.exit(main())
