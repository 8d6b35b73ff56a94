"""Unit tests for the exception hierarchy."""

import pytest

from pdp_functions.utils.exceptions import (
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


def test_partial_dependence_error_repr():
    """repr carries the class name and message."""
    err = PartialDependenceError("test message")
    repr_str = repr(err)
    assert "PartialDependenceError" in repr_str
    assert "test message" in repr_str


def test_details_are_attached():
    err = InvalidFeatureError("unknown feature 'q'", details={"feature": "q"})
    assert err.details == {"feature": "q"}
    assert str(err) == "unknown feature 'q'"


@pytest.mark.parametrize(
    "cls",
    [SchemaMismatchError, InvalidTaskError, InvalidFeatureError, UnknownLevelError, EmptyTrainingDataError],
)
def test_validation_family(cls):
    err = cls("bad input")
    assert isinstance(err, ValidationError)
    assert isinstance(err, PartialDependenceError)


@pytest.mark.parametrize(
    "cls", [ConfigurationError, ModelNotSupportedError, NotFittedError, ModelInvocationError]
)
def test_non_validation_family(cls):
    err = cls("boom")
    assert isinstance(err, PartialDependenceError)
    assert not isinstance(err, ValidationError)


def test_unknown_level_is_a_key_error():
    """Callers doing dict-style lookups can catch KeyError."""
    with pytest.raises(KeyError):
        raise UnknownLevelError("'purple' is not an observed level")
    assert str(UnknownLevelError("plain message")) == "plain message"


def test_invalid_prediction_is_a_model_invocation_error():
    assert issubclass(InvalidPredictionError, ModelInvocationError)


def test_explain_exception_formats_details():
    e = InvalidFeatureError("unknown feature 'z'", details={"feature": "z"})
    assert explain_exception(e) == "InvalidFeatureError: unknown feature 'z'\n  Details: {'feature': 'z'}"


def test_explain_exception_without_details_and_foreign_errors():
    assert explain_exception(ConfigurationError("bad")) == "ConfigurationError: bad"
    assert explain_exception(ValueError("plain")) == "plain"
