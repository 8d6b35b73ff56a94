"""Shared pytest fixtures for partial dependence tests."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from pdp_functions import Interpreter, InterpreterConfig, Predictor
from tests.helpers.model_utils import LinearModel, LookupModel

_ENV_VARS = (
    "PDP_GRID_SIZE",
    "PDP_GRID_SIZE_2D",
    "PDP_GRID_METHOD",
    "PDP_SAMPLES",
    "PDP_ICE_POINTS",
    "PDP_SEED",
    "PDP_PARALLEL",
    "PDP_DIAGNOSTIC_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from PDP_* variables and any pyproject.toml in the cwd."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def linear_data() -> pd.DataFrame:
    """100 rows with ``x`` evenly spread over [0, 10] and a noise feature."""
    rng = np.random.default_rng(7)
    x = np.linspace(0.0, 10.0, 100)
    return pd.DataFrame({"x": x, "z": rng.normal(size=100), "y": 2.0 * x})


@pytest.fixture
def linear_predictor(linear_data) -> Predictor:
    """Regression Predictor over ``2 * x``."""
    return Predictor(LinearModel({"x": 2.0}), linear_data, outcome="y", task="regression")


@pytest.fixture
def linear_interpreter(linear_predictor) -> Interpreter:
    """Interpreter with defaults over the linear predictor."""
    return Interpreter(linear_predictor, config=InterpreterConfig())


@pytest.fixture
def mixed_data() -> pd.DataFrame:
    """Five rows with a categorical ``color`` and continuous ``x``."""
    return pd.DataFrame(
        {
            "color": ["red", "blue", "red", "green", "blue"],
            "x": [1.0, 2.0, 3.0, 4.0, 5.0],
            "y": [0.0, 1.0, 0.0, 1.0, 1.0],
        }
    )


@pytest.fixture
def mixed_predictor(mixed_data) -> Predictor:
    """Predictor of ``effect[color] + x``."""
    model = LookupModel({"red": 1.0, "green": 2.0, "blue": 3.0}, column="color", numeric="x")
    return Predictor(model, mixed_data, outcome="y", task="regression")


@pytest.fixture
def mixed_interpreter(mixed_predictor) -> Interpreter:
    """Interpreter over the mixed predictor with the color/x pair registered."""
    return Interpreter(mixed_predictor, pairs=[("color", "x")], config=InterpreterConfig())
