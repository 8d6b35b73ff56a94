"""Adapters that normalize heterogeneous model outputs to one float per row.

One adapter is resolved per Predictor at construction time. Every adapter
exposes ``predict(frame) -> numpy.ndarray`` of shape ``(n_rows,)`` and is
otherwise stateless, so adapters are safe to share across threads.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np
import pandas as pd

from ..utils.exceptions import (
    InvalidPredictionError,
    ModelInvocationError,
    ModelNotSupportedError,
)

logger = logging.getLogger(__name__)

PredictFunc = Callable[[Any, pd.DataFrame], Any]


class ModelAdapter:
    """Base adapter: invoke the model, then validate the raw output."""

    name = "base"

    def __init__(self, model: Any) -> None:
        self.model = model

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={type(self.model).__name__})"

    def predict(self, frame: pd.DataFrame) -> np.ndarray:
        """Return one finite float per row of ``frame``."""
        try:
            raw = self._invoke(frame)
        except ModelInvocationError:
            raise
        except Exception as exc:
            raise ModelInvocationError(
                f"{type(self.model).__name__} raised {type(exc).__name__}: {exc}",
                details={"adapter": self.name, "n_rows": len(frame)},
            ) from exc
        values = self._normalize(raw, len(frame))
        return _check_finite(values, self.name)

    def _invoke(self, frame: pd.DataFrame) -> Any:
        raise NotImplementedError

    def _normalize(self, raw: Any, n_rows: int) -> np.ndarray:
        return _as_vector(raw, n_rows, self.name)


class RegressionAdapter(ModelAdapter):
    """Numeric ``predict`` output used as-is."""

    name = "regression"

    def _invoke(self, frame: pd.DataFrame) -> Any:
        return self.model.predict(frame)


class ProbabilityAdapter(ModelAdapter):
    """Probability of the reference class taken from ``predict_proba``."""

    name = "probability"

    def __init__(self, model: Any, reference_class: Any = None) -> None:
        super().__init__(model)
        self.reference_class = reference_class
        self._column = _reference_column(model, reference_class)

    def _invoke(self, frame: pd.DataFrame) -> Any:
        return self.model.predict_proba(frame)

    def _normalize(self, raw: Any, n_rows: int) -> np.ndarray:
        try:
            proba = np.asarray(raw, dtype=float)
        except (TypeError, ValueError) as exc:
            raise ModelInvocationError(
                "predict_proba returned non-numeric output.", details={"adapter": self.name}
            ) from exc
        if proba.ndim == 1:
            # single-column probability output: already the reference class
            return _as_vector(proba, n_rows, self.name)
        if proba.ndim != 2 or proba.shape[0] != n_rows:
            raise ModelInvocationError(
                f"predict_proba returned shape {proba.shape}, expected ({n_rows}, n_classes).",
                details={"adapter": self.name, "shape": proba.shape, "n_rows": n_rows},
            )
        column = self._column if self._column is not None else proba.shape[1] - 1
        if not -proba.shape[1] <= column < proba.shape[1]:
            raise ModelInvocationError(
                f"Reference class column {column} out of range for {proba.shape[1]} classes.",
                details={"adapter": self.name, "column": column},
            )
        return proba[:, column]


class LabelAdapter(ModelAdapter):
    """Indicator of the reference class for classifiers without probabilities.

    When no reference class can be determined, numeric labels are returned
    unchanged.
    """

    name = "label"

    def __init__(self, model: Any, reference_class: Any = None) -> None:
        super().__init__(model)
        if reference_class is None:
            classes = getattr(model, "classes_", None)
            if classes is not None and len(classes) > 0:
                reference_class = classes[-1]
        self.reference_class = reference_class

    def _invoke(self, frame: pd.DataFrame) -> Any:
        return self.model.predict(frame)

    def _normalize(self, raw: Any, n_rows: int) -> np.ndarray:
        labels = np.asarray(raw)
        if labels.ndim != 1 or labels.shape[0] != n_rows:
            raise ModelInvocationError(
                f"predict returned shape {labels.shape}, expected ({n_rows},).",
                details={"adapter": self.name, "shape": labels.shape, "n_rows": n_rows},
            )
        if self.reference_class is None:
            return _as_vector(labels, n_rows, self.name)
        return (labels == self.reference_class).astype(float)


class CallableAdapter(ModelAdapter):
    """User supplied ``predict_func(model, frame)``."""

    name = "callable"

    def __init__(self, model: Any, predict_func: PredictFunc) -> None:
        super().__init__(model)
        self.predict_func = predict_func

    def _invoke(self, frame: pd.DataFrame) -> Any:
        return self.predict_func(self.model, frame)


def _reference_column(model: Any, reference_class: Any) -> int | None:
    classes = getattr(model, "classes_", None)
    if reference_class is None:
        return None
    if classes is None:
        if isinstance(reference_class, (int, np.integer)):
            return int(reference_class)
        raise ModelNotSupportedError(
            "reference_class given by label but the model exposes no classes_.",
            details={"reference_class": reference_class},
        )
    matches = np.flatnonzero(np.asarray(classes) == reference_class)
    if matches.size == 0:
        raise ModelNotSupportedError(
            f"reference_class {reference_class!r} is not one of the model classes {list(classes)}.",
            details={"reference_class": reference_class, "classes": list(classes)},
        )
    return int(matches[0])


def _as_vector(raw: Any, n_rows: int, adapter: str) -> np.ndarray:
    if isinstance(raw, (pd.Series, pd.DataFrame)):
        raw = raw.to_numpy()
    try:
        values = np.asarray(raw, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ModelInvocationError(
            "Model returned non-numeric predictions.", details={"adapter": adapter}
        ) from exc
    if values.ndim == 2 and values.shape[1] == 1:
        values = values[:, 0]
    if values.ndim != 1 or values.shape[0] != n_rows:
        raise ModelInvocationError(
            f"Model returned shape {values.shape}, expected ({n_rows},).",
            details={"adapter": adapter, "shape": values.shape, "n_rows": n_rows},
        )
    return values


def _check_finite(values: np.ndarray, adapter: str) -> np.ndarray:
    bad = ~np.isfinite(values)
    if bad.any():
        rows = np.flatnonzero(bad)
        raise InvalidPredictionError(
            f"Model returned {rows.size} NaN or infinite prediction(s).",
            details={"adapter": adapter, "rows": rows[:20].tolist(), "n_invalid": int(rows.size)},
        )
    return values


def resolve_adapter(
    model: Any,
    task: str,
    *,
    predict_func: PredictFunc | None = None,
    reference_class: Any = None,
) -> ModelAdapter:
    """Pick the adapter for ``model`` and ``task`` ("regression" or "classification")."""
    if predict_func is not None:
        if not callable(predict_func):
            raise ModelNotSupportedError("predict_func must be callable.")
        adapter: ModelAdapter = CallableAdapter(model, predict_func)
    elif task == "classification" and callable(getattr(model, "predict_proba", None)):
        adapter = ProbabilityAdapter(model, reference_class)
    elif not callable(getattr(model, "predict", None)):
        raise ModelNotSupportedError(
            f"{type(model).__name__} has no predict method.",
            details={"model": type(model).__name__, "task": task},
        )
    elif task == "classification":
        adapter = LabelAdapter(model, reference_class)
    else:
        adapter = RegressionAdapter(model)
    logger.debug("Resolved %r for task %s", adapter, task)
    return adapter


__all__ = [
    "ModelAdapter",
    "RegressionAdapter",
    "ProbabilityAdapter",
    "LabelAdapter",
    "CallableAdapter",
    "PredictFunc",
    "resolve_adapter",
]
