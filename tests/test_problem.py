"""Tests for loading and transforming labelled datasets."""

from pathlib import Path

import pytest

from svm_toolkit.data_types import FeatureNode
from svm_toolkit.problem import Problem


def values(problem: Problem, column: int) -> list[float]:
    """Return one dense column of a problem."""
    return [instance[column].value for instance in problem.instances]


class TestFromArray:
    def test_dense_instances(self) -> None:
        problem = Problem.from_array([[0.0, 1.0], [2.0, 3.0]], [1, -1])
        assert problem.size == 2
        assert problem.num_features == 2
        assert problem.labels == (1.0, -1.0)
        assert problem.instances[1] == (FeatureNode(0, 2.0), FeatureNode(1, 3.0))

    def test_label_count_mismatch(self) -> None:
        with pytest.raises(ValueError, match="Number of instances must equal number of labels"):
            Problem.from_array([[1.0]], [1, 2])

    def test_no_instances(self) -> None:
        with pytest.raises(ValueError, match="at least one instance"):
            Problem.from_array([], [])

    def test_ragged_instances(self) -> None:
        with pytest.raises(ValueError, match="same size"):
            Problem.from_array([[1.0], [1.0, 2.0]], [1, 2])


class TestReaders:
    """File formats."""

    def test_svmlight(self, tmp_path: Path) -> None:
        path = tmp_path / "train.svm"
        path.write_text("1 1:0.5 3:2\n# comment\n\n-1 2:1.0 # trailing\n", encoding="utf-8")
        problem = Problem.from_svmlight(path)
        assert problem.labels == (1.0, -1.0)
        assert problem.instances[0] == (FeatureNode(1, 0.5), FeatureNode(3, 2.0))
        assert problem.num_features == 4

    def test_svmlight_malformed(self, tmp_path: Path) -> None:
        path = tmp_path / "train.svm"
        path.write_text("1 1:0.5\n2 1:x\n", encoding="utf-8")
        with pytest.raises(ValueError, match=":2: malformed svmlight line"):
            Problem.from_svmlight(path)

    def test_svmlight_unordered_indices(self, tmp_path: Path) -> None:
        path = tmp_path / "train.svm"
        path.write_text("1 3:0.5 1:1.0\n", encoding="utf-8")
        with pytest.raises(ValueError, match="strictly ascending"):
            Problem.from_svmlight(path)

    def test_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "train.csv"
        path.write_text("1,0.5,2\n0,1,0\n", encoding="utf-8")
        problem = Problem.from_csv(path)
        assert problem.labels == (1.0, 0.0)
        assert values(problem, 0) == [0.5, 1.0]
        assert values(problem, 1) == [2.0, 0.0]

    def test_csv_malformed(self, tmp_path: Path) -> None:
        path = tmp_path / "train.csv"
        path.write_text("1,abc\n", encoding="utf-8")
        with pytest.raises(ValueError, match="malformed CSV line"):
            Problem.from_csv(path)

    def test_arff(self, tmp_path: Path) -> None:
        path = tmp_path / "train.arff"
        path.write_text(
            "@relation weather\n@attribute temp numeric\n@attribute outlook {sunny,rainy}\n"
            "@attribute play numeric\n@data\n% comment\n21.5,sunny,1\n\n18,rainy,0\n",
            encoding="utf-8",
        )
        problem = Problem.from_arff(path)
        assert problem.labels == (1.0, 0.0)
        assert values(problem, 0) == [21.5, 18.0]
        assert values(problem, 1) == [0.0, 0.0]

    def test_arff_non_numeric_class(self, tmp_path: Path) -> None:
        path = tmp_path / "train.arff"
        path.write_text("@data\n1.0,2.0,yes\n", encoding="utf-8")
        with pytest.raises(ValueError, match="non-numeric class value"):
            Problem.from_arff(path)


class TestRescale:
    def test_rescale(self) -> None:
        problem = Problem.from_array([[1.0], [1.5], [2.0]], [1, 2, 3])
        assert values(problem.rescale(-1.0, 1.0), 0) == pytest.approx([-1.0, 0.0, 1.0])
        assert values(problem.rescale(), 0) == pytest.approx([0.0, 0.5, 1.0])

    def test_constant_column(self) -> None:
        problem = Problem.from_array([[3.0, 1.0], [3.0, 2.0]], [1, 2])
        assert values(problem.rescale(-1.0, 1.0), 0) == [-1.0, -1.0]

    def test_labels_kept(self) -> None:
        problem = Problem.from_array([[1.0], [2.0]], [4, 5])
        assert problem.rescale().labels == (4.0, 5.0)


class TestMerge:
    def test_merge(self) -> None:
        first = Problem.from_array([[1.0, 2.0]], [1])
        second = Problem.from_array([[3.0, 4.0], [5.0, 6.0]], [2, 3])
        merged = first.merge(second)
        assert merged.size == 3
        assert merged.labels == (1.0, 2.0, 3.0)

    def test_merge_feature_mismatch(self) -> None:
        first = Problem.from_array([[1.0, 2.0]], [1])
        second = Problem.from_array([[3.0]], [2])
        with pytest.raises(ValueError, match="different numbers of features"):
            first.merge(second)
