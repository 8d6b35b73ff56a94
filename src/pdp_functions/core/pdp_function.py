"""Callable partial dependence functions.

A PDP function owns its grid and the marginal averages aligned with it and
answers queries at arbitrary values:

- continuous axes interpolate linearly between the bracketing grid points;
  queries outside ``[min, max]`` are clamped to the boundary value, never
  extrapolated;
- categorical axes are exact lookups and raise :class:`UnknownLevelError`
  for levels not observed when the grid was built.

Pair functions combine both rules per axis, which gives bilinear
interpolation for two continuous features, interpolation along the
continuous axis for mixed pairs and an exact two-key lookup for two
categorical features.
"""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np
import pandas as pd

from ..utils.exceptions import UnknownLevelError, ValidationError
from .features import FeatureDescriptor, FeatureKind
from .grid import Grid, PairGrid


def _readonly(values: Any) -> np.ndarray:
    array = np.array(values, dtype=float)
    array.setflags(write=False)
    return array


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bytes)) or np.ndim(value) == 0


def _as_query_array(value: Any) -> np.ndarray:
    if isinstance(value, pd.Series):
        value = value.to_numpy()
    array = np.empty(len(value), dtype=object)
    array[:] = list(value)
    return array


def _axis_positions(grid: Grid, queries: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Map query values to ``(lower index, upper index, upper weight)`` on one axis."""
    if grid.is_categorical:
        index = np.empty(len(queries), dtype=int)
        for k, query in enumerate(queries):
            index[k] = _level_index(grid.descriptor, query)
        return index, index, np.zeros(len(queries))

    x = _numeric(grid.descriptor, queries)
    points = np.asarray(grid.values, dtype=float)
    if len(points) == 1:
        zeros = np.zeros(len(x), dtype=int)
        return zeros, zeros, np.zeros(len(x))
    x = np.clip(x, points[0], points[-1])
    upper = np.clip(np.searchsorted(points, x, side="right"), 1, len(points) - 1)
    lower = upper - 1
    weight = (x - points[lower]) / (points[upper] - points[lower])
    return lower, upper, weight


def _level_index(descriptor: FeatureDescriptor, value: Any) -> int:
    try:
        return descriptor.level_index(value)
    except KeyError:
        raise UnknownLevelError(
            f"{value!r} is not an observed level of '{descriptor.name}'.",
            details={"feature": descriptor.name, "level": value, "levels": list(descriptor.levels)},
        ) from None


def _numeric(descriptor: FeatureDescriptor, queries: np.ndarray) -> np.ndarray:
    try:
        x = np.asarray(queries, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Queries for continuous feature '{descriptor.name}' must be numeric.",
            details={"feature": descriptor.name},
        ) from exc
    if np.isnan(x).any():
        raise ValidationError(
            f"Cannot evaluate '{descriptor.name}' at NaN.", details={"feature": descriptor.name}
        )
    return x


class PDPFunction1D:
    """Partial dependence of the model on one feature.

    Parameters
    ----------
    grid : Grid
        Evaluation points in grid order.
    values : array-like
        Mean prediction at each grid point.
    """

    def __init__(self, grid: Grid, values: Any) -> None:
        values = _readonly(values)
        if values.shape != (len(grid),):
            raise ValidationError(
                f"Expected {len(grid)} PDP values for '{grid.name}', got shape {values.shape}.",
                details={"feature": grid.name},
            )
        self._grid = grid
        self._values = values

    def __repr__(self) -> str:
        return f"PDPFunction1D(feature={self.feature!r}, kind={self.kind.value}, n_grid={len(self._grid)})"

    @property
    def feature(self) -> str:
        return self._grid.name

    @property
    def descriptor(self) -> FeatureDescriptor:
        return self._grid.descriptor

    @property
    def kind(self) -> FeatureKind:
        return self._grid.descriptor.kind

    @property
    def grid(self) -> np.ndarray:
        return self._grid.values

    @property
    def values(self) -> np.ndarray:
        return self._values

    def evaluate(self, value: Any) -> float | np.ndarray:
        """Return the PDP at ``value`` (a scalar or a 1D sequence of values)."""
        if _is_scalar(value):
            return float(self._evaluate(_as_query_array([value]))[0])
        return self._evaluate(_as_query_array(value))

    __call__ = evaluate

    def _evaluate(self, queries: np.ndarray) -> np.ndarray:
        if self._grid.is_categorical:
            lower, _, _ = _axis_positions(self._grid, queries)
            return self._values[lower]
        x = _numeric(self.descriptor, queries)
        return np.interp(x, np.asarray(self._grid.values, dtype=float), self._values)

    def to_frame(self) -> pd.DataFrame:
        """Return the stored series as a two-column DataFrame."""
        return pd.DataFrame({self.feature: self._grid.values.tolist(), "pdp": self._values})


class PDPFunction2D:
    """Partial dependence of the model on a pair of features.

    ``values[i, j]`` is the mean prediction with the first feature set to
    ``grid[0][i]`` and the second to ``grid[1][j]``.
    """

    def __init__(self, grid: PairGrid, values: Any) -> None:
        values = _readonly(values)
        if values.shape != grid.shape:
            raise ValidationError(
                f"Expected PDP values of shape {grid.shape} for {grid.names}, got {values.shape}.",
                details={"pair": grid.names},
            )
        self._grid = grid
        self._values = values

    def __repr__(self) -> str:
        return f"PDPFunction2D(features={self.features!r}, shape={self._values.shape})"

    @property
    def features(self) -> Tuple[str, str]:
        return self._grid.names

    @property
    def descriptors(self) -> Tuple[FeatureDescriptor, FeatureDescriptor]:
        return (self._grid.first.descriptor, self._grid.second.descriptor)

    @property
    def grid(self) -> Tuple[np.ndarray, np.ndarray]:
        return (self._grid.first.values, self._grid.second.values)

    @property
    def values(self) -> np.ndarray:
        return self._values

    def transpose(self) -> "PDPFunction2D":
        """Return the same function with the axes swapped."""
        return PDPFunction2D(PairGrid(self._grid.second, self._grid.first), self._values.T)

    def evaluate(self, value1: Any, value2: Any) -> float | np.ndarray:
        """Return the PDP at ``(value1, value2)``.

        Both arguments may be scalars or equal-length 1D sequences; the
        first argument refers to ``features[0]``.
        """
        if _is_scalar(value1) and _is_scalar(value2):
            return float(self._evaluate(_as_query_array([value1]), _as_query_array([value2]))[0])
        first = _as_query_array([value1] if _is_scalar(value1) else value1)
        second = _as_query_array([value2] if _is_scalar(value2) else value2)
        if len(first) == 1 and len(second) > 1:
            first = np.repeat(first, len(second))
        elif len(second) == 1 and len(first) > 1:
            second = np.repeat(second, len(first))
        if len(first) != len(second):
            raise ValidationError(
                "Query sequences for a pair must have equal length.",
                details={"pair": self.features, "lengths": (len(first), len(second))},
            )
        return self._evaluate(first, second)

    __call__ = evaluate

    def _evaluate(self, first: np.ndarray, second: np.ndarray) -> np.ndarray:
        a0, a1, wa = _axis_positions(self._grid.first, first)
        b0, b1, wb = _axis_positions(self._grid.second, second)
        z = self._values
        return (
            (1.0 - wa) * (1.0 - wb) * z[a0, b0]
            + (1.0 - wa) * wb * z[a0, b1]
            + wa * (1.0 - wb) * z[a1, b0]
            + wa * wb * z[a1, b1]
        )

    def to_frame(self) -> pd.DataFrame:
        """Return the stored surface in long format, one row per grid cell."""
        first, second = self.grid
        rows = [(a, b) for a in first.tolist() for b in second.tolist()]
        frame = pd.DataFrame(rows, columns=list(self.features))
        frame["pdp"] = self._values.ravel()
        return frame


class ICECurves:
    """Individual conditional expectation curves for a subset of rows.

    ``values[r, k]`` is the prediction for training row ``row_index[r]``
    with the feature set to ``grid[k]``.
    """

    def __init__(self, grid: Grid, values: Any, row_index: Any) -> None:
        values = _readonly(values)
        if values.ndim != 2 or values.shape[1] != len(grid):
            raise ValidationError(
                f"ICE values for '{grid.name}' must have shape (n_rows, {len(grid)}).",
                details={"feature": grid.name, "shape": values.shape},
            )
        self._grid = grid
        self._values = values
        self._rows = np.asarray(row_index, dtype=int)
        self._rows.setflags(write=False)
        self._curves = [PDPFunction1D(grid, row) for row in values]

    def __repr__(self) -> str:
        return f"ICECurves(feature={self.feature!r}, n_curves={len(self._curves)})"

    def __len__(self) -> int:
        return len(self._curves)

    @property
    def feature(self) -> str:
        return self._grid.name

    @property
    def grid(self) -> np.ndarray:
        return self._grid.values

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def row_index(self) -> np.ndarray:
        return self._rows

    def evaluate(self, value: Any) -> np.ndarray:
        """Evaluate every curve; shape ``(n_curves,)`` or ``(n_curves, n_queries)``."""
        if not self._curves:
            return np.empty((0,) if _is_scalar(value) else (0, len(value)))
        return np.array([curve.evaluate(value) for curve in self._curves])

    __call__ = evaluate


__all__ = ["PDPFunction1D", "PDPFunction2D", "ICECurves"]
