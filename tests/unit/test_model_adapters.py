"""Unit tests for model output normalization."""

import numpy as np
import pandas as pd
import pytest

from pdp_functions.core.model_adapters import (
    CallableAdapter,
    LabelAdapter,
    ProbabilityAdapter,
    RegressionAdapter,
    resolve_adapter,
)
from pdp_functions.utils.exceptions import (
    InvalidPredictionError,
    ModelInvocationError,
    ModelNotSupportedError,
)
from tests.helpers.model_utils import (
    LabelOnlyModel,
    LinearModel,
    NaNModel,
    NoPredictModel,
    ProbaModel,
    RaisingModel,
    WrongShapeModel,
)


@pytest.fixture
def frame():
    return pd.DataFrame({"x": [0.0, 2.5, 5.0, 10.0]})


def test_resolve_adapter_by_task():
    assert isinstance(resolve_adapter(LinearModel(), "regression"), RegressionAdapter)
    assert isinstance(resolve_adapter(ProbaModel(), "classification"), ProbabilityAdapter)
    assert isinstance(resolve_adapter(LabelOnlyModel(), "classification"), LabelAdapter)
    adapter = resolve_adapter(NoPredictModel(), "regression", predict_func=lambda m, f: np.zeros(len(f)))
    assert isinstance(adapter, CallableAdapter)


def test_resolve_adapter_without_predict():
    with pytest.raises(ModelNotSupportedError):
        resolve_adapter(NoPredictModel(), "regression")
    with pytest.raises(ModelNotSupportedError):
        resolve_adapter(LinearModel(), "regression", predict_func="not callable")


def test_regression_adapter_passes_values(frame):
    out = RegressionAdapter(LinearModel({"x": 2.0})).predict(frame)
    np.testing.assert_allclose(out, [0.0, 5.0, 10.0, 20.0])


def test_regression_adapter_flattens_column_output(frame):
    adapter = CallableAdapter(None, lambda _m, f: f[["x"]].to_numpy())
    np.testing.assert_allclose(adapter.predict(frame), frame["x"].to_numpy())


def test_probability_adapter_defaults_to_last_class(frame):
    out = ProbabilityAdapter(ProbaModel()).predict(frame)
    np.testing.assert_allclose(out, [0.0, 0.25, 0.5, 1.0])


def test_probability_adapter_reference_class(frame):
    out = ProbabilityAdapter(ProbaModel(), reference_class="no").predict(frame)
    np.testing.assert_allclose(out, [1.0, 0.75, 0.5, 0.0])


def test_probability_adapter_unknown_reference_class():
    with pytest.raises(ModelNotSupportedError):
        ProbabilityAdapter(ProbaModel(), reference_class="maybe")


def test_label_adapter_indicator(frame):
    out = LabelAdapter(LabelOnlyModel()).predict(frame)
    np.testing.assert_array_equal(out, [0.0, 0.0, 0.0, 1.0])
    out = LabelAdapter(LabelOnlyModel(), reference_class="no").predict(frame)
    np.testing.assert_array_equal(out, [1.0, 1.0, 1.0, 0.0])


def test_nan_predictions_rejected(frame):
    with pytest.raises(InvalidPredictionError) as exc_info:
        RegressionAdapter(NaNModel()).predict(frame)
    assert exc_info.value.details["n_invalid"] == 4
    assert exc_info.value.details["rows"] == [0, 1, 2, 3]


def test_model_exceptions_are_wrapped(frame):
    with pytest.raises(ModelInvocationError) as exc_info:
        RegressionAdapter(RaisingModel()).predict(frame)
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert "model exploded" in str(exc_info.value)


def test_wrong_shape_rejected(frame):
    with pytest.raises(ModelInvocationError):
        RegressionAdapter(WrongShapeModel()).predict(frame)


def test_non_numeric_predictions_rejected(frame):
    adapter = CallableAdapter(None, lambda _m, f: np.array(["a"] * len(f)))
    with pytest.raises(ModelInvocationError):
        adapter.predict(frame)
