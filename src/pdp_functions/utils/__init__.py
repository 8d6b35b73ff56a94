"""Shared utilities used across pdp_functions.

Re-exports the exception taxonomy so callers can import directly from
``pdp_functions.utils``.
"""

from .exceptions import (
    ConfigurationError,
    EmptyTrainingDataError,
    InvalidFeatureError,
    InvalidPredictionError,
    InvalidTaskError,
    ModelInvocationError,
    ModelNotSupportedError,
    NotFittedError,
    PartialDependenceError,
    SchemaMismatchError,
    UnknownLevelError,
    ValidationError,
    explain_exception,
)

__all__ = [
    "ConfigurationError",
    "EmptyTrainingDataError",
    "InvalidFeatureError",
    "InvalidPredictionError",
    "InvalidTaskError",
    "ModelInvocationError",
    "ModelNotSupportedError",
    "NotFittedError",
    "PartialDependenceError",
    "SchemaMismatchError",
    "UnknownLevelError",
    "ValidationError",
    "explain_exception",
]
