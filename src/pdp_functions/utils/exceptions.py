"""Exception hierarchy for pdp_functions.

All library errors inherit from :class:`PartialDependenceError` and accept a
structured ``details`` payload alongside the user-facing message. Errors are
raised immediately where they are detected; nothing in the package retries or
silently skips a failing row.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "PartialDependenceError",
    "ValidationError",
    "SchemaMismatchError",
    "InvalidTaskError",
    "InvalidFeatureError",
    "UnknownLevelError",
    "EmptyTrainingDataError",
    "ConfigurationError",
    "ModelNotSupportedError",
    "NotFittedError",
    "ModelInvocationError",
    "InvalidPredictionError",
    "explain_exception",
]


class PartialDependenceError(Exception):
    """Base class for library-specific errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Attach structured error details alongside the user-facing message."""
        super().__init__(message)
        self.details: dict[str, Any] | None = details

    def __repr__(self) -> str:
        """Return the exception representation with the message payload."""
        cls = self.__class__.__name__
        return f"{cls}({str(self)!r})"

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ValidationError(PartialDependenceError):
    """Inputs failed validation."""


class SchemaMismatchError(ValidationError):
    """Columns do not match the feature set fixed at Predictor construction."""


class InvalidTaskError(ValidationError):
    """Task is neither regression nor classification."""


class InvalidFeatureError(ValidationError):
    """Feature name is unknown, is the outcome, or forms an invalid pair."""


class UnknownLevelError(ValidationError, KeyError):
    """Categorical value was not observed when the grid was built."""


class EmptyTrainingDataError(ValidationError):
    """No rows (or no observed values) to marginalize over."""


class ConfigurationError(PartialDependenceError):
    """Invalid or conflicting configuration value."""


class ModelNotSupportedError(PartialDependenceError):
    """Model lacks the prediction capability required for the task."""


class NotFittedError(PartialDependenceError):
    """Model has not been fitted."""


class ModelInvocationError(PartialDependenceError):
    """Underlying model raised or returned malformed output."""


class InvalidPredictionError(ModelInvocationError):
    """Model returned NaN, infinite or missing predictions."""


def explain_exception(e: Exception) -> str:
    """Return a human-readable multi-line description of an exception.

    Examples
    --------
    >>> from pdp_functions.utils.exceptions import InvalidFeatureError, explain_exception
    >>> e = InvalidFeatureError("unknown feature 'z'", details={"feature": "z"})
    >>> print(explain_exception(e))
    InvalidFeatureError: unknown feature 'z'
      Details: {'feature': 'z'}
    """
    if isinstance(e, PartialDependenceError):
        lines = [f"{e.__class__.__name__}: {str(e)}"]
        if e.details is not None:
            lines.append(f"  Details: {e.details}")
        return "\n".join(lines)
    return str(e)
