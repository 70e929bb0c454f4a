"""Exceptions raised by model loading and inference."""


class InvalidKernelConfig(ValueError):
    """Raised when a kernel family is not one the evaluator knows."""

    def __init__(self, kernel_type: str, supported: set[str]) -> None:
        """Initialize the exception with the offending kernel type.

        Args:
            kernel_type: Kernel family found in the model configuration.
            supported: Kernel families the evaluator can compute.
        """
        self.kernel_type = kernel_type
        self.supported = supported
        super().__init__(f"Unknown kernel type: {kernel_type!r}. Supported: {', '.join(sorted(supported))}")


class CorruptModel(ValueError):
    """Raised when a model document violates the trained-model invariants."""


class ProbabilityUnavailable(ValueError):
    """Raised when probability output is requested from an uncalibrated model."""
