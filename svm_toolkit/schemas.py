"""Pydantic models for trained-model documents.

These schemas describe the mapping a model repository hands to the
model builder (typically parsed from a YAML or JSON file). They check
field presence and types only; cross-field invariants are checked by
svm_toolkit.model.build_model.
"""

from pydantic import BaseModel, ConfigDict, Field

SVM_TYPES: set[str] = {"c_svc", "nu_svc", "one_class", "epsilon_svr", "nu_svr"}
CLASSIFICATION_TYPES: set[str] = {"c_svc", "nu_svc"}


class KernelParameters(BaseModel):
    """Kernel configuration shared by every decision function of a model."""

    kernel_type: str = Field(..., description="linear, polynomial, rbf, sigmoid or precomputed")
    degree: int = Field(3, ge=0, description="Degree of the polynomial kernel")
    gamma: float = Field(0.0, description="Gamma for polynomial, rbf and sigmoid kernels")
    coef0: float = Field(0.0, description="Independent term for polynomial and sigmoid kernels")

    model_config = ConfigDict(frozen=True, extra="forbid")


class ModelDocument(BaseModel):
    """Raw trained-model document as produced by an external trainer."""

    svm_type: str = Field("c_svc", description="c_svc, nu_svc, one_class, epsilon_svr or nu_svr")
    kernel: KernelParameters
    class_count: int = Field(..., ge=1, description="Number of classes (2 for regression/one-class)")
    total_support_vectors: int = Field(..., ge=0, description="Total number of support vectors")
    support_vectors: list[list[tuple[int, float]]] = Field(..., description="Support vectors as [index, value] pairs")
    dual_coefficients: list[list[float]] = Field(..., description="class_count - 1 rows of length total_support_vectors")
    rho: list[float] = Field(..., description="Bias of each pairwise decision function")
    class_labels: list[int] | None = Field(None, description="Label of each internal class index")
    support_vector_counts: list[int] | None = Field(None, description="Support vectors per class, in storage order")
    prob_a: list[float] | None = Field(None, description="Pairwise sigmoid slope parameters")
    prob_b: list[float] | None = Field(None, description="Pairwise sigmoid offset parameters")
    support_vector_labels: list[int] | None = Field(None, description="Optional label of each support vector")
    support_vector_indices: list[int] | None = Field(None, description="Training-set indices of the support vectors")
    w_squared: list[float] | None = Field(None, description="Squared hyperplane norm of each binary SVM")
    cost: float | None = Field(None, gt=0.0, description="Regularisation parameter C used at training time")

    model_config = ConfigDict(frozen=True, extra="forbid")
