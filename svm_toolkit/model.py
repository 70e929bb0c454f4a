"""Immutable trained SVM model and the builder that validates it.

A TrainedModel is only ever produced by build_model, which checks every
structural invariant of the document and precomputes the per-class offset
table and the per-pair slice view used by the decision function engine.
Once built, a model exposes no mutators and its coefficient array is
flagged read-only, so it can be shared by concurrent inference calls.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import ValidationError

from svm_toolkit.data_types import PairwiseSlice, SparseVector, as_sparse_vector
from svm_toolkit.errors import CorruptModel
from svm_toolkit.schemas import CLASSIFICATION_TYPES, SVM_TYPES, KernelParameters, ModelDocument

logger = logging.getLogger(__name__)


def pair_count(class_count: int) -> int:
    """Number of unordered class pairs (one-vs-one decision functions)."""
    return class_count * (class_count - 1) // 2


@dataclass(frozen=True, eq=False)
class TrainedModel:
    """A trained SVM model, read-only for its whole lifetime.

    Attributes:
        svm_type: c_svc, nu_svc, one_class, epsilon_svr or nu_svr.
        kernel: Kernel configuration shared by all decision functions.
        class_count: Number of classes (2 for regression/one-class).
        total_support_vectors: Number of support vectors (l).
        support_vectors: The l support vectors, grouped by class.
        dual_coefficients: Read-only array of shape [class_count - 1, l].
        rho: Bias of each pairwise decision function, canonical pair order.
        class_labels: Label of each internal class index (classification only).
        support_vector_counts: Support vectors per class (classification only).
        prob_a: Pairwise sigmoid slopes, or None without calibration.
        prob_b: Pairwise sigmoid offsets, or None without calibration.
        class_offsets: Prefix sums of support_vector_counts, length class_count + 1.
        pair_slices: One PairwiseSlice per class pair, canonical order.
        support_vector_indices: Training-set indices of the support vectors.
        w_squared: Squared hyperplane norm of each binary SVM.
        cost: Regularisation parameter C the model was trained with, if recorded.
    """

    svm_type: str
    kernel: KernelParameters
    class_count: int
    total_support_vectors: int
    support_vectors: tuple[SparseVector, ...]
    dual_coefficients: NDArray[np.float64]
    rho: tuple[float, ...]
    class_labels: tuple[int, ...] | None
    support_vector_counts: tuple[int, ...] | None
    prob_a: tuple[float, ...] | None
    prob_b: tuple[float, ...] | None
    class_offsets: tuple[int, ...]
    pair_slices: tuple[PairwiseSlice, ...]
    support_vector_indices: tuple[int, ...] | None = None
    w_squared: tuple[float, ...] | None = None
    cost: float | None = None

    @property
    def number_classes(self) -> int:
        """Number of classes handled by this model."""
        return self.class_count

    @property
    def kernel_type(self) -> str:
        return self.kernel.kernel_type

    @property
    def degree(self) -> int:
        return self.kernel.degree

    @property
    def gamma(self) -> float:
        return self.kernel.gamma

    @property
    def coef0(self) -> float:
        return self.kernel.coef0

    @property
    def is_classification(self) -> bool:
        """True for c_svc and nu_svc models, which predict by voting."""
        return self.svm_type in CLASSIFICATION_TYPES

    @property
    def has_probability_model(self) -> bool:
        """True when pairwise calibration parameters are present."""
        return self.prob_a is not None and self.prob_b is not None

    @property
    def pair_count(self) -> int:
        return pair_count(self.class_count)

    def support_vector_indices_list(self) -> list[int]:
        """Return training-set indices of the support vectors (empty if unknown)."""
        if self.support_vector_indices is None:
            return []
        return list(self.support_vector_indices)

    def w_squared_value(self) -> float | list[float] | None:
        """Return the squared hyperplane norm.

        Returns:
            A single float when the model has one binary SVM, a list with
            one entry per binary SVM otherwise, or None if not recorded.
        """
        if self.w_squared is None:
            return None
        if len(self.w_squared) == 1:
            return self.w_squared[0]
        return list(self.w_squared)


def build_model(document: ModelDocument | Mapping[str, Any]) -> TrainedModel:
    """Validate a model document and freeze it into a TrainedModel.

    Args:
        document: A ModelDocument, or a raw mapping with the same fields.

    Returns:
        The validated, immutable TrainedModel.

    Raises:
        CorruptModel: If the document is malformed or violates any
            structural invariant (mismatched lengths, non-contiguous class
            grouping, invalid sparse vectors, unknown svm_type).
    """
    if not isinstance(document, ModelDocument):
        try:
            document = ModelDocument.model_validate(document)
        except ValidationError as e:
            error_messages = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
            raise CorruptModel(f"Model document validation failed: {error_messages}") from e

    errors: list[str] = []
    n_sv = document.total_support_vectors
    n_pairs = pair_count(document.class_count)

    if document.svm_type not in SVM_TYPES:
        raise CorruptModel(f"Unknown svm_type: {document.svm_type!r}. Supported: {', '.join(sorted(SVM_TYPES))}")
    is_classification = document.svm_type in CLASSIFICATION_TYPES

    if not is_classification and document.class_count != 2:
        errors.append(f"{document.svm_type} models must have class_count 2, got {document.class_count}")

    support_vectors = _check_support_vectors(document, errors)
    _check_dual_coefficients(document, errors)

    if len(document.rho) != n_pairs:
        errors.append(f"rho has {len(document.rho)} entries, expected {n_pairs}")

    if (document.prob_a is None) != (document.prob_b is None):
        errors.append("prob_a and prob_b must be given together")
    for name, values in (("prob_a", document.prob_a), ("prob_b", document.prob_b)):
        if values is not None and len(values) != n_pairs:
            errors.append(f"{name} has {len(values)} entries, expected {n_pairs}")

    if document.support_vector_indices is not None and len(document.support_vector_indices) != n_sv:
        errors.append(f"support_vector_indices has {len(document.support_vector_indices)} entries, expected {n_sv}")
    if document.w_squared is not None and len(document.w_squared) != n_pairs:
        errors.append(f"w_squared has {len(document.w_squared)} entries, expected {n_pairs}")

    if is_classification:
        _check_class_layout(document, errors)
    elif document.support_vector_counts is not None and sum(document.support_vector_counts) != n_sv:
        errors.append(f"support_vector_counts sum to {sum(document.support_vector_counts)}, expected {n_sv}")

    if errors:
        raise CorruptModel("Model validation failed:\n" + "\n".join(errors))

    class_offsets: tuple[int, ...] = ()
    pair_slices: tuple[PairwiseSlice, ...] = ()
    if is_classification and document.support_vector_counts is not None:
        class_offsets = _prefix_sums(document.support_vector_counts)
        pair_slices = _build_pair_slices(document.class_count, class_offsets)

    dual_coefficients = np.array(document.dual_coefficients, dtype=np.float64).reshape(document.class_count - 1, n_sv)
    dual_coefficients.flags.writeable = False

    model = TrainedModel(
        svm_type=document.svm_type,
        kernel=document.kernel,
        class_count=document.class_count,
        total_support_vectors=n_sv,
        support_vectors=support_vectors,
        dual_coefficients=dual_coefficients,
        rho=tuple(document.rho),
        class_labels=tuple(document.class_labels) if document.class_labels is not None else None,
        support_vector_counts=tuple(document.support_vector_counts) if document.support_vector_counts is not None else None,
        prob_a=tuple(document.prob_a) if document.prob_a is not None else None,
        prob_b=tuple(document.prob_b) if document.prob_b is not None else None,
        class_offsets=class_offsets,
        pair_slices=pair_slices,
        support_vector_indices=tuple(document.support_vector_indices) if document.support_vector_indices is not None else None,
        w_squared=tuple(document.w_squared) if document.w_squared is not None else None,
        cost=document.cost,
    )
    logger.debug(
        "Built model: svm_type=%s kernel=%s classes=%d support_vectors=%d probability=%s",
        model.svm_type,
        model.kernel_type,
        model.class_count,
        model.total_support_vectors,
        model.has_probability_model,
    )
    return model


def _check_support_vectors(document: ModelDocument, errors: list[str]) -> tuple[SparseVector, ...]:
    """Validate the sparse encoding of every stored support vector."""
    if len(document.support_vectors) != document.total_support_vectors:
        errors.append(f"support_vectors has {len(document.support_vectors)} entries, expected {document.total_support_vectors}")

    vectors: list[SparseVector] = []
    for i, raw in enumerate(document.support_vectors):
        try:
            vector = as_sparse_vector(raw)
        except ValueError as e:
            errors.append(f"support_vectors[{i}]: {e}")
            continue
        # Precomputed support vectors carry their serial number as first node
        if document.kernel.kernel_type == "precomputed" and not vector:
            errors.append(f"support_vectors[{i}]: precomputed kernel support vector has no serial number")
        vectors.append(vector)
    return tuple(vectors)


def _check_dual_coefficients(document: ModelDocument, errors: list[str]) -> None:
    """Check the [class_count - 1, l] shape of the coefficient table."""
    expected_rows = document.class_count - 1
    if len(document.dual_coefficients) != expected_rows:
        errors.append(f"dual_coefficients has {len(document.dual_coefficients)} rows, expected {expected_rows}")
    for k, row in enumerate(document.dual_coefficients):
        if len(row) != document.total_support_vectors:
            errors.append(f"dual_coefficients[{k}] has {len(row)} entries, expected {document.total_support_vectors}")


def _check_class_layout(document: ModelDocument, errors: list[str]) -> None:
    """Check labels, per-class counts and contiguous class grouping."""
    k = document.class_count
    labels = document.class_labels
    counts = document.support_vector_counts

    if labels is None:
        errors.append("class_labels is required for classification models")
    elif len(labels) != k:
        errors.append(f"class_labels has {len(labels)} entries, expected {k}")
    elif len(set(labels)) != len(labels):
        errors.append(f"class_labels must be unique, got {labels}")

    if counts is None:
        errors.append("support_vector_counts is required for classification models")
        return
    if len(counts) != k:
        errors.append(f"support_vector_counts has {len(counts)} entries, expected {k}")
        return
    if any(c < 0 for c in counts):
        errors.append(f"support_vector_counts must be non-negative, got {counts}")
        return
    if sum(counts) != document.total_support_vectors:
        errors.append(f"support_vector_counts sum to {sum(counts)}, expected {document.total_support_vectors}")
        return

    sv_labels = document.support_vector_labels
    if sv_labels is None or labels is None or len(labels) != k:
        return

    expected = [label for label, count in zip(labels, counts, strict=True) for _ in range(count)]
    if len(sv_labels) != len(expected):
        errors.append(f"support_vector_labels has {len(sv_labels)} entries, expected {len(expected)}")
        return
    for position, (actual, wanted) in enumerate(zip(sv_labels, expected, strict=True)):
        if actual != wanted:
            errors.append(
                f"support vectors are not grouped contiguously by class: position {position} has label {actual}, expected {wanted}"
            )
            return


def _prefix_sums(counts: list[int]) -> tuple[int, ...]:
    """Return [0, c0, c0 + c1, ...], the class boundary offsets."""
    offsets = [0]
    for count in counts:
        offsets.append(offsets[-1] + count)
    return tuple(offsets)


def _build_pair_slices(class_count: int, class_offsets: tuple[int, ...]) -> tuple[PairwiseSlice, ...]:
    """Enumerate class pairs (i < j) in canonical nested order."""
    slices: list[PairwiseSlice] = []
    p = 0
    for i in range(class_count):
        for j in range(i + 1, class_count):
            slices.append(
                PairwiseSlice(
                    pair_index=p,
                    class_i=i,
                    class_j=j,
                    start_i=class_offsets[i],
                    end_i=class_offsets[i + 1],
                    start_j=class_offsets[j],
                    end_j=class_offsets[j + 1],
                    row_i=j - 1,
                    row_j=i,
                )
            )
            p += 1
    return tuple(slices)
