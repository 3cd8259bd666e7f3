"""Exception types raised by the retrieval and generation pipeline.

Each exception carries a stable ``error_code`` so failures can be identified
in logs and JSON responses without parsing messages.
"""

from typing import Any


class DreamRAGError(Exception):
    """Base exception for all pipeline errors."""

    error_code: str = "DREAM_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            cause: Underlying exception that caused this error
            context: Additional key-value pairs for debugging
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "type": type(self).__name__,
            "code": self.error_code,
            "message": self.message,
        }
        if self.extra_context:
            result["context"] = self.extra_context
        if self.cause:
            result["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return result


class EmbeddingFailure(DreamRAGError):
    """The embedding backend failed or returned an invalid result."""

    error_code = "DREAM_EMB_001"


class GenerationFailure(DreamRAGError):
    """The generation backend failed or returned no text."""

    error_code = "DREAM_GEN_001"


class SimilarityStoreError(DreamRAGError):
    """The similarity store could not complete an operation."""

    error_code = "DREAM_VEC_001"


class DimensionMismatch(SimilarityStoreError):
    """A vector's length differs from the store's dimensionality."""

    error_code = "DREAM_VEC_002"

    def __init__(self, expected: int, actual: int, **kwargs: Any) -> None:
        self.expected = expected
        self.actual = actual
        context = {"expected": expected, "actual": actual, **kwargs.pop("context", {})}
        super().__init__(
            f"Vector has {actual} dimensions, store expects {expected}",
            context=context,
            **kwargs,
        )


class PDFExtractionError(DreamRAGError):
    """An uploaded file could not be read as a PDF."""

    error_code = "DREAM_PDF_001"
