"""Minimal model helpers used throughout tests."""

from typing import Any, Optional

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import LinearRegression, LogisticRegression


class LinearModel:
    """Deterministic model: ``sum(coef[c] * x[c])`` over the given columns."""

    def __init__(self, coef: Optional[dict] = None, intercept: float = 0.0) -> None:
        self.coef = coef or {"x": 2.0}
        self.intercept = intercept
        self.calls = 0

    def predict(self, x: pd.DataFrame) -> np.ndarray:
        """Return the linear combination of the configured columns."""
        self.calls += 1
        out = np.full(len(x), self.intercept, dtype=float)
        for name, weight in self.coef.items():
            out += weight * x[name].to_numpy(dtype=float)
        return out


class LookupModel:
    """Model that maps a categorical column to a fixed effect and adds a numeric one."""

    def __init__(self, effects: dict, column: str = "color", numeric: Optional[str] = None) -> None:
        self.effects = effects
        self.column = column
        self.numeric = numeric

    def predict(self, x: pd.DataFrame) -> np.ndarray:
        """Return ``effects[level]`` plus the numeric column when configured."""
        out = np.array([self.effects[v] for v in x[self.column]], dtype=float)
        if self.numeric is not None:
            out += x[self.numeric].to_numpy(dtype=float)
        return out


class ProductModel:
    """Model with a pure interaction term: ``a * b``."""

    def predict(self, x: pd.DataFrame) -> np.ndarray:
        """Return the row-wise product of columns ``a`` and ``b``."""
        return x["a"].to_numpy(dtype=float) * x["b"].to_numpy(dtype=float)


class NaNModel:
    """Model returning NaN for every row."""

    def predict(self, x: Any) -> np.ndarray:
        """Return NaN predictions."""
        return np.full(len(x), np.nan)


class RaisingModel:
    """Model whose predict always fails."""

    def predict(self, x: Any) -> np.ndarray:
        """Raise a runtime error."""
        raise RuntimeError("model exploded")


class WrongShapeModel:
    """Model returning one prediction too few."""

    def predict(self, x: Any) -> np.ndarray:
        """Return ``len(x) - 1`` zeros."""
        return np.zeros(max(len(x) - 1, 0))


class NoPredictModel:
    """Object without any prediction method."""

    def fit(self, x: Any, y: Any) -> "NoPredictModel":  # pragma: no cover - unused
        """Return self."""
        return self


class ProbaModel:
    """Binary classifier with ``P(class 'yes') = clip(x / 10, 0, 1)``."""

    def __init__(self, classes: tuple = ("no", "yes")) -> None:
        self.classes_ = np.array(classes)

    def predict_proba(self, x: pd.DataFrame) -> np.ndarray:
        """Return two-column probabilities driven by column ``x``."""
        p = np.clip(x["x"].to_numpy(dtype=float) / 10.0, 0.0, 1.0)
        return np.column_stack([1.0 - p, p])

    def predict(self, x: pd.DataFrame) -> np.ndarray:
        """Return the most likely class label."""
        proba = self.predict_proba(x)
        return self.classes_[proba.argmax(axis=1)]


class LabelOnlyModel:
    """Classifier exposing only ``predict`` and ``classes_``."""

    classes_ = np.array(["no", "yes"])

    def predict(self, x: pd.DataFrame) -> np.ndarray:
        """Return 'yes' where ``x > 5``."""
        return np.where(x["x"].to_numpy(dtype=float) > 5, "yes", "no")


def get_regression_model(model_name, x_train, y_train):
    """Return a fitted regression model (RF or linear)."""
    if model_name == "RF":
        model = RandomForestRegressor(n_estimators=10, random_state=42)
    else:
        model = LinearRegression()
    model.fit(x_train, y_train)
    return model, model_name


def get_classification_model(model_name, x_train, y_train):
    """Return a fitted classification model (RF or logistic)."""
    if model_name == "RF":
        model = RandomForestClassifier(n_estimators=10, random_state=42)
    else:
        model = LogisticRegression(max_iter=500)
    model.fit(x_train, y_train)
    return model, model_name
