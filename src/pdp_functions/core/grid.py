"""Evaluation grids for one feature or a pair of features.

Continuous grids span the observed range and always contain the observed
minimum and maximum, so in-range queries never need extrapolation.
Categorical grids hold every observed level in canonical order.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Any, Iterator, Literal, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from ..utils.exceptions import ConfigurationError, InvalidFeatureError, UnknownLevelError, ValidationError
from .features import FeatureDescriptor
from .predictor import Predictor

GridMethod = Literal["uniform", "quantile"]
GRID_METHODS = ("uniform", "quantile")


def _frozen(values: np.ndarray) -> np.ndarray:
    values.setflags(write=False)
    return values


@dataclass(frozen=True, eq=False)
class Grid:
    """Ordered, deduplicated evaluation values for one feature."""

    descriptor: FeatureDescriptor
    values: np.ndarray

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def is_categorical(self) -> bool:
        return self.descriptor.is_categorical

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values.tolist())


@dataclass(frozen=True, eq=False)
class PairGrid:
    """Cartesian product of two single-feature grids, first axis outermost."""

    first: Grid
    second: Grid

    @property
    def names(self) -> Tuple[str, str]:
        return (self.first.name, self.second.name)

    @property
    def shape(self) -> Tuple[int, int]:
        return (len(self.first), len(self.second))

    def __len__(self) -> int:
        return len(self.first) * len(self.second)

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        return product(self.first.values.tolist(), self.second.values.tolist())


class GridBuilder:
    """Build grids for the features of a :class:`Predictor`.

    Parameters
    ----------
    predictor : Predictor
        Source of the training data and feature descriptors.
    grid_size : int, default=51
        Number of points for a continuous feature in a 1D grid.
    grid_size_2d : int, default=21
        Number of points per continuous axis of a pair grid. Kept smaller
        than ``grid_size`` because a pair costs ``|grid_a| * |grid_b|``
        batch predictions.
    method : {"uniform", "quantile"}, default="uniform"
        Evenly spaced values between min and max, or observed quantiles.
    grid_points : mapping, optional
        Explicit values per feature. Continuous values are merged with the
        observed min and max; categorical values must be observed levels.
    """

    def __init__(
        self,
        predictor: Predictor,
        *,
        grid_size: int = 51,
        grid_size_2d: int = 21,
        method: GridMethod = "uniform",
        grid_points: Mapping[str, Sequence[Any]] | None = None,
    ) -> None:
        if grid_size < 2 or grid_size_2d < 2:
            raise ConfigurationError(
                "Grid sizes must be at least 2.",
                details={"grid_size": grid_size, "grid_size_2d": grid_size_2d},
            )
        if method not in GRID_METHODS:
            raise ConfigurationError(
                f"Unknown grid method {method!r}; expected one of {GRID_METHODS}.",
                details={"method": method},
            )
        self.predictor = predictor
        self.grid_size = int(grid_size)
        self.grid_size_2d = int(grid_size_2d)
        self.method = method
        self._frame = predictor.feature_frame()
        self._grid_points = {}
        for name, values in (grid_points or {}).items():
            self._grid_points[predictor.check_feature(str(name))] = list(values)

    def grid(self, name: str) -> Grid:
        """Return the 1D grid for feature ``name``."""
        return self._build(name, self.grid_size)

    def pair_grid(self, first: str, second: str) -> PairGrid:
        """Return the pair grid for ``(first, second)``."""
        if first == second:
            raise InvalidFeatureError(
                f"A feature pair needs two distinct features, got '{first}' twice.",
                details={"pair": (first, second)},
            )
        return PairGrid(self._build(first, self.grid_size_2d), self._build(second, self.grid_size_2d))

    def _build(self, name: str, size: int) -> Grid:
        descriptor = self.predictor.descriptor(name)
        if descriptor.is_categorical:
            if name in self._grid_points:
                values = self._categorical_subset(descriptor, self._grid_points[name])
            else:
                values = list(descriptor.levels)
            array = np.empty(len(values), dtype=object)
            array[:] = values
            return Grid(descriptor, _frozen(array))
        if name in self._grid_points:
            values = self._continuous_user(descriptor, self._grid_points[name])
        else:
            values = self._continuous_generated(descriptor, size)
        return Grid(descriptor, _frozen(values))

    def _continuous_generated(self, descriptor: FeatureDescriptor, size: int) -> np.ndarray:
        observed = self._frame[descriptor.name].dropna().to_numpy(dtype=float)
        uniques = np.unique(observed)
        if uniques.size <= size:
            return uniques
        if self.method == "quantile":
            values = np.quantile(observed, np.linspace(0.0, 1.0, size))
        else:
            values = np.linspace(descriptor.minimum, descriptor.maximum, size)
        return np.unique(values)

    @staticmethod
    def _continuous_user(descriptor: FeatureDescriptor, values: Sequence[Any]) -> np.ndarray:
        try:
            array = np.asarray(values, dtype=float)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                f"Grid points for '{descriptor.name}' must be numeric.",
                details={"feature": descriptor.name},
            ) from exc
        if array.ndim != 1 or not np.isfinite(array).all():
            raise ValidationError(
                f"Grid points for '{descriptor.name}' must be a finite 1D sequence.",
                details={"feature": descriptor.name},
            )
        return np.unique(np.concatenate([array, [descriptor.minimum, descriptor.maximum]]))

    @staticmethod
    def _categorical_subset(descriptor: FeatureDescriptor, values: Sequence[Any]) -> list:
        wanted = set()
        for value in values:
            try:
                wanted.add(descriptor.level_index(value))
            except KeyError as exc:
                raise UnknownLevelError(
                    f"{value!r} is not an observed level of '{descriptor.name}'.",
                    details={"feature": descriptor.name, "level": value},
                ) from exc
        if not wanted:
            raise ValidationError(
                f"Grid points for '{descriptor.name}' must not be empty.",
                details={"feature": descriptor.name},
            )
        return [descriptor.levels[i] for i in sorted(wanted)]


def assign_values(frame: pd.DataFrame, assignments: Mapping[str, Any]) -> pd.DataFrame:
    """Return a copy of ``frame`` with each named column overwritten by one value.

    Categorical columns keep their dtype so models that rely on category
    codes see the same encoding as during training.
    """
    modified = frame.copy()
    n = len(modified)
    for name, value in assignments.items():
        dtype = frame[name].dtype
        if isinstance(dtype, pd.CategoricalDtype):
            modified[name] = pd.Categorical([value] * n, dtype=dtype)
        else:
            modified[name] = value
    return modified


__all__ = ["Grid", "PairGrid", "GridBuilder", "GridMethod", "GRID_METHODS", "assign_values"]
