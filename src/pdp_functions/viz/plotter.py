"""Plotter: turn an Interpreter's PDP functions into chart specs.

The Plotter owns display settings only (centering references, display grids
and axis labels). Every chart is derived on demand by querying the
Interpreter's immutable PDP functions, so changing a setting never touches
the functions themselves.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Literal, Mapping, Sequence, Tuple

import numpy as np

from ..core.interpreter import Interpreter, PairKey
from ..core.pdp_function import PDPFunction1D
from ..utils.exceptions import ValidationError
from .chartspec import ChartSpec, LineChartSpec, SurfaceChartSpec

logger = logging.getLogger(__name__)

PlotMethod = Literal["pdp", "ice", "pdp+ice"]
PLOT_METHODS = ("pdp", "ice", "pdp+ice")


class Plotter:
    """Display adapter over an :class:`Interpreter`.

    Parameters
    ----------
    interpreter : Interpreter
        Source of the PDP functions.
    features : iterable of str, optional
        Features to chart; defaults to all. Charts follow training column
        order regardless of the order given here.
    features_2d : iterable of (str, str), optional
        Pairs to chart. Pairs not yet registered on the Interpreter are
        computed through :meth:`Interpreter.add_pair`.
    center_at : mapping, optional
        Initial centering references, see :meth:`set_center_at`.
    grid_points : mapping, optional
        Initial display grids, see :meth:`set_grid_points`.
    """

    def __init__(
        self,
        interpreter: Interpreter,
        features: Iterable[str] | None = None,
        features_2d: Iterable[Tuple[str, str]] = (),
        *,
        center_at: Mapping[str, Any] | None = None,
        grid_points: Mapping[str, Sequence[Any]] | None = None,
    ) -> None:
        self._interpreter = interpreter
        predictor = interpreter.predictor
        if features is None:
            self._features = interpreter.features
        else:
            wanted = {predictor.check_feature(str(name)) for name in features}
            self._features = tuple(name for name in interpreter.features if name in wanted)

        pairs: List[Tuple[str, str]] = []
        seen: set[PairKey] = set()
        for first, second in features_2d:
            key = interpreter.pair_key(first, second)
            if key in seen:
                continue
            interpreter.add_pair(first, second)
            seen.add(key)
            pairs.append((first, second))
        self._pairs = tuple(pairs)

        self._center_at: Dict[str, Any] = {}
        self._grid_points: Dict[str, np.ndarray] = {}
        self._labels: Dict[str, str] = {}
        for name, value in (center_at or {}).items():
            self.set_center_at(name, value)
        for name, values in (grid_points or {}).items():
            self.set_grid_points(name, values)

    def __repr__(self) -> str:
        return f"Plotter(features={list(self._features)}, features_2d={list(self._pairs)})"

    @property
    def interpreter(self) -> Interpreter:
        return self._interpreter

    @property
    def features(self) -> Tuple[str, ...]:
        return self._features

    @property
    def features_2d(self) -> Tuple[Tuple[str, str], ...]:
        return self._pairs

    @property
    def center_at(self) -> Mapping[str, Any]:
        return MappingProxyType(self._center_at)

    @property
    def grid_points(self) -> Mapping[str, np.ndarray]:
        return MappingProxyType(self._grid_points)

    # ------------------------------------------------------------------
    # Display settings
    # ------------------------------------------------------------------
    def set_center_at(self, feature: str, value: Any) -> "Plotter":
        """Center ``feature`` so its displayed PDP is zero at ``value``.

        ``None`` removes the centering. The reference is validated by
        evaluating the PDP there, so an unknown categorical level raises
        :class:`~pdp_functions.utils.exceptions.UnknownLevelError`.
        """
        function = self._interpreter.pdp(feature)
        if value is None:
            self._center_at.pop(feature, None)
            return self
        function.evaluate(value)
        self._center_at[feature] = value
        logger.debug("Centering '%s' at %r", feature, value)
        return self

    def set_grid_points(self, feature: str, values: Sequence[Any] | None) -> "Plotter":
        """Use ``values`` as the display grid for ``feature`` (``None`` resets it).

        Continuous values are sorted and deduplicated; categorical values
        must be observed levels and are shown in canonical order.
        """
        function = self._interpreter.pdp(feature)
        if values is None:
            self._grid_points.pop(feature, None)
            return self
        values = list(values)
        if not values:
            raise ValidationError(
                f"Display grid for '{feature}' must not be empty.", details={"feature": feature}
            )
        function.evaluate(values)
        descriptor = function.descriptor
        if descriptor.is_categorical:
            positions = sorted({descriptor.level_index(v) for v in values})
            array = np.empty(len(positions), dtype=object)
            array[:] = [descriptor.levels[i] for i in positions]
        else:
            array = np.unique(np.asarray(values, dtype=float))
        self._grid_points[feature] = array
        return self

    def set_feature_label(self, feature: str, label: str) -> "Plotter":
        """Axis label used for ``feature`` in produced charts."""
        self._interpreter.pdp(feature)
        self._labels[feature] = str(label)
        return self

    def label(self, feature: str) -> str:
        return self._labels.get(feature, feature)

    def display_grid(self, feature: str) -> np.ndarray:
        """The values at which ``feature`` is displayed."""
        if feature in self._grid_points:
            return self._grid_points[feature]
        return self._interpreter.pdp(feature).grid

    # ------------------------------------------------------------------
    # Derived series
    # ------------------------------------------------------------------
    def value_at(self, feature: str, value: Any) -> float | np.ndarray:
        """Displayed (centered) PDP of ``feature`` at ``value``."""
        function = self._interpreter.pdp(feature)
        return self._centered(function, feature, value)

    def _centered(self, function: PDPFunction1D, feature: str, x: Any) -> float | np.ndarray:
        raw = function.evaluate(x)
        if feature not in self._center_at:
            return raw
        return raw - function.evaluate(self._center_at[feature])

    def _line_chart(self, feature: str, method: PlotMethod) -> LineChartSpec:
        function = self._interpreter.pdp(feature)
        x = self.display_grid(feature)
        y = None
        if method in ("pdp", "pdp+ice"):
            y = np.asarray(self._centered(function, feature, x), dtype=float).tolist()
        ice = rows = None
        if method in ("ice", "pdp+ice"):
            curves = self._interpreter.ice(feature)
            values = curves.evaluate(x)
            if feature in self._center_at and len(curves):
                values = values - curves.evaluate(self._center_at[feature])[:, None]
            ice = np.asarray(values, dtype=float).tolist()
            rows = curves.row_index.tolist()
        return LineChartSpec(
            feature=feature,
            feature_kind=function.kind.value,
            x=x.tolist(),
            y=y,
            xlabel=self.label(feature),
            center_at=self._center_at.get(feature),
            ice=ice,
            ice_rows=rows,
            title=feature,
        )

    def _surface_chart(self, first: str, second: str) -> SurfaceChartSpec:
        function = self._interpreter.add_pair(first, second)
        grid_first, grid_second = function.grid
        x = self._grid_points.get(first, grid_first)
        y = self._grid_points.get(second, grid_second)
        xs = np.repeat(np.asarray(x, dtype=object), len(y))
        ys = np.tile(np.asarray(y, dtype=object), len(x))
        z = np.asarray(function.evaluate(xs, ys), dtype=float).reshape(len(x), len(y))
        center = None
        if first in self._center_at and second in self._center_at:
            center = (self._center_at[first], self._center_at[second])
            z = z - function.evaluate(*center)
        kinds = tuple(d.kind.value for d in function.descriptors)
        return SurfaceChartSpec(
            features=(first, second),
            feature_kinds=kinds,  # type: ignore[arg-type]
            x=x.tolist(),
            y=y.tolist(),
            z=z.tolist(),
            xlabel=self.label(first),
            ylabel=self.label(second),
            center_at=center,
            title=f"{first} x {second}",
        )

    def plot(self, method: PlotMethod = "pdp") -> List[ChartSpec]:
        """Return one chart per feature followed by one per pair.

        Parameters
        ----------
        method : {"pdp", "ice", "pdp+ice"}
            Mean curve, individual curves, or both. Pair charts always show
            the mean surface.
        """
        if method not in PLOT_METHODS:
            raise ValidationError(
                f"Unknown plot method {method!r}; expected one of {PLOT_METHODS}.",
                details={"method": method},
            )
        charts: List[ChartSpec] = [self._line_chart(name, method) for name in self._features]
        charts.extend(self._surface_chart(first, second) for first, second in self._pairs)
        return charts


def set_center_at(plotter: Plotter, feature: str, value: Any) -> Plotter:
    """Functional form of :meth:`Plotter.set_center_at`."""
    return plotter.set_center_at(feature, value)


def plot(plotter: Plotter, method: PlotMethod = "pdp") -> List[ChartSpec]:
    """Functional form of :meth:`Plotter.plot`."""
    return plotter.plot(method)


__all__ = ["Plotter", "PlotMethod", "PLOT_METHODS", "plot", "set_center_at"]
