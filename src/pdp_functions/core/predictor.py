"""Predictor: a trained model frozen together with its training snapshot."""

from __future__ import annotations

import logging
from enum import Enum
from functools import cached_property
from typing import Any, Dict, Mapping, Tuple

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.exceptions import NotFittedError as SklearnNotFittedError
from sklearn.utils.validation import check_is_fitted

from ..utils.exceptions import (
    InvalidFeatureError,
    InvalidTaskError,
    NotFittedError,
    SchemaMismatchError,
)
from .features import FeatureDescriptor, FeatureKind, describe_features
from .model_adapters import ModelAdapter, PredictFunc, resolve_adapter

logger = logging.getLogger(__name__)


class Task(str, Enum):
    """Prediction task; determines how raw model output is normalized."""

    REGRESSION = "regression"
    CLASSIFICATION = "classification"

    @classmethod
    def coerce(cls, value: "Task | str") -> "Task":
        try:
            return cls(value.lower() if isinstance(value, str) else value)
        except ValueError as exc:
            raise InvalidTaskError(
                f"Task must be 'regression' or 'classification', got {value!r}.",
                details={"task": value},
            ) from exc


def _as_frame(data: Any) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        frame = data.copy(deep=True)
    else:
        try:
            frame = pd.DataFrame(data)
        except (TypeError, ValueError) as exc:
            raise SchemaMismatchError(
                f"Training data of type {type(data).__name__} cannot be read as a table.",
                details={"type": type(data).__name__},
            ) from exc
    frame.columns = [str(c) for c in frame.columns]
    if frame.columns.duplicated().any():
        dupes = sorted(set(frame.columns[frame.columns.duplicated()]))
        raise SchemaMismatchError(
            f"Training data has duplicate column names: {dupes}.", details={"duplicates": dupes}
        )
    return frame.reset_index(drop=True)


class Predictor:
    """Wrap a fitted model, its training data and its task.

    The Predictor is frozen after construction: its attributes cannot be
    reassigned and the training data is a private deep copy, so every
    Interpreter built from it stays valid for the Predictor's lifetime.

    Parameters
    ----------
    model : object
        A fitted estimator. Regression models need ``predict``;
        classification models need ``predict_proba`` or ``predict``.
    data : pandas.DataFrame or table-like
        Training data including the outcome column.
    outcome : str
        Name of the outcome column; every other column is a feature.
    task : {"regression", "classification"} or Task
        Determines how model output is reduced to one value per row.
    predict_func : callable, optional
        ``predict_func(model, frame)`` used instead of the model's methods.
    reference_class : optional
        Class whose probability is explained for classification. Defaults to
        the last entry of ``model.classes_``.
    feature_kinds : mapping, optional
        Overrides for the inferred continuous/categorical kind per feature.
    """

    def __init__(
        self,
        model: Any,
        data: Any,
        outcome: str,
        task: Task | str,
        *,
        predict_func: PredictFunc | None = None,
        reference_class: Any = None,
        feature_kinds: Mapping[str, FeatureKind | str] | None = None,
    ) -> None:
        frame = _as_frame(data)
        outcome = str(outcome)
        if outcome not in frame.columns:
            raise SchemaMismatchError(
                f"Outcome '{outcome}' is not a column of the training data.",
                details={"outcome": outcome, "columns": list(frame.columns)},
            )
        features = tuple(c for c in frame.columns if c != outcome)
        if not features:
            raise SchemaMismatchError(
                "Training data has no feature columns besides the outcome.",
                details={"outcome": outcome},
            )
        task = Task.coerce(task)
        if isinstance(model, BaseEstimator) and predict_func is None:
            try:
                check_is_fitted(model)
            except SklearnNotFittedError as exc:
                raise NotFittedError(
                    f"{type(model).__name__} must be fitted before wrapping it in a Predictor.",
                    details={"model": type(model).__name__},
                ) from exc
        adapter = resolve_adapter(
            model, task.value, predict_func=predict_func, reference_class=reference_class
        )

        object.__setattr__(self, "_model", model)
        object.__setattr__(self, "_data", frame)
        object.__setattr__(self, "_outcome", outcome)
        object.__setattr__(self, "_task", task)
        object.__setattr__(self, "_features", features)
        object.__setattr__(self, "_adapter", adapter)
        object.__setattr__(self, "_feature_kinds", dict(feature_kinds or {}))
        logger.debug(
            "Predictor ready: %d rows, %d features, task=%s, adapter=%s",
            len(frame),
            len(features),
            task.value,
            adapter.name,
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Predictor is frozen; cannot set '{name}'.")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Predictor is frozen; cannot delete '{name}'.")

    def __repr__(self) -> str:
        return (
            f"Predictor(model={type(self._model).__name__}, task={self._task.value}, "
            f"outcome={self._outcome!r}, n_rows={len(self._data)}, n_features={len(self._features)})"
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def model(self) -> Any:
        return self._model

    @property
    def outcome(self) -> str:
        return self._outcome

    @property
    def task(self) -> Task:
        return self._task

    @property
    def features(self) -> Tuple[str, ...]:
        """Feature names in training column order."""
        return self._features

    @property
    def adapter(self) -> ModelAdapter:
        return self._adapter

    @property
    def n_rows(self) -> int:
        return len(self._data)

    @property
    def data(self) -> pd.DataFrame:
        """A copy of the full training snapshot, outcome included."""
        return self._data.copy()

    def feature_frame(self) -> pd.DataFrame:
        """A copy of the training snapshot restricted to the feature columns."""
        return self._data.loc[:, list(self._features)].copy()

    @property
    def outcome_values(self) -> np.ndarray:
        return self._data[self._outcome].to_numpy(copy=True)

    @cached_property
    def descriptors(self) -> Dict[str, FeatureDescriptor]:
        """Feature descriptors in column order, computed once on first use."""
        return describe_features(self._data.loc[:, list(self._features)], self._feature_kinds)

    def descriptor(self, name: str) -> FeatureDescriptor:
        """Return the descriptor for ``name`` or raise :class:`InvalidFeatureError`."""
        self.check_feature(name)
        return self.descriptors[name]

    def check_feature(self, name: str) -> str:
        """Validate that ``name`` is a feature of this Predictor."""
        if name == self._outcome:
            raise InvalidFeatureError(
                f"'{name}' is the outcome, not a feature.",
                details={"feature": name, "outcome": self._outcome},
            )
        if name not in self._features:
            raise InvalidFeatureError(
                f"Unknown feature '{name}'.",
                details={"feature": name, "features": list(self._features)},
            )
        return name

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def predict(self, rows: pd.DataFrame) -> np.ndarray:
        """Return one normalized prediction per row.

        ``rows`` must hold exactly the feature columns (any order). Regression
        yields the model output; classification yields the probability (or
        indicator) of the reference class.
        """
        if not isinstance(rows, pd.DataFrame):
            raise SchemaMismatchError(
                f"predict expects a pandas DataFrame, got {type(rows).__name__}.",
                details={"type": type(rows).__name__},
            )
        columns = [str(c) for c in rows.columns]
        if len(columns) != len(self._features) or set(columns) != set(self._features):
            missing = sorted(set(self._features) - set(columns))
            extra = sorted(set(columns) - set(self._features))
            raise SchemaMismatchError(
                "Row columns do not match the Predictor's feature set.",
                details={"missing": missing, "unexpected": extra},
            )
        if columns != list(self._features):
            rows = rows.set_axis(columns, axis=1).loc[:, list(self._features)]
        return self._adapter.predict(rows)


__all__ = ["Predictor", "Task"]
