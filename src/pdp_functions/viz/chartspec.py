"""Backend-agnostic chart specifications produced by :class:`Plotter`.

A chart spec carries the series to draw plus feature metadata and nothing
backend specific, so any plotting library can render it. The matplotlib
adapter in :mod:`pdp_functions.viz.matplotlib_adapter` is one consumer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Tuple, Union

CHARTSPEC_VERSION = "1.0.0"


@dataclass
class LineChartSpec:
    """PDP of one feature, optionally with ICE curves.

    ``y`` is ``None`` when only ICE curves were requested. ``ice[r][k]`` is
    the value of curve ``r`` at ``x[k]``.
    """

    feature: str
    feature_kind: str
    x: Sequence[Any]
    y: Sequence[float] | None
    xlabel: str
    ylabel: str = "partial dependence"
    center_at: Any | None = None
    ice: Sequence[Sequence[float]] | None = None
    ice_rows: Sequence[int] | None = None
    title: str | None = None
    kind: str = "pdp_1d"
    chartspec_version: str = CHARTSPEC_VERSION

    @property
    def is_categorical(self) -> bool:
        return self.feature_kind == "categorical"


@dataclass
class SurfaceChartSpec:
    """PDP of a feature pair on a grid: ``z[i][j]`` at ``(x[i], y[j])``."""

    features: Tuple[str, str]
    feature_kinds: Tuple[str, str]
    x: Sequence[Any]
    y: Sequence[Any]
    z: Sequence[Sequence[float]]
    xlabel: str
    ylabel: str
    zlabel: str = "partial dependence"
    center_at: Tuple[Any, Any] | None = None
    title: str | None = None
    kind: str = "pdp_2d"
    chartspec_version: str = CHARTSPEC_VERSION


ChartSpec = Union[LineChartSpec, SurfaceChartSpec]

__all__ = ["CHARTSPEC_VERSION", "ChartSpec", "LineChartSpec", "SurfaceChartSpec"]
