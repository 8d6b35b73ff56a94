"""Matplotlib adapter for chart specs.

Renders the specs produced by :class:`~pdp_functions.viz.plotter.Plotter`:
line charts (bars for categorical features) with optional ICE curves, and
heatmaps for feature pairs. matplotlib is imported on first render.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

import numpy as np

from ..utils.exceptions import ValidationError
from .chartspec import ChartSpec, LineChartSpec, SurfaceChartSpec

PDP_COLOR = "#1f77b4"
ICE_COLOR = "#7f7f7f"
_MAX_TICKS = 8


def _tick_positions(n: int) -> np.ndarray:
    if n <= _MAX_TICKS:
        return np.arange(n)
    return np.unique(np.linspace(0, n - 1, _MAX_TICKS).round().astype(int))


def _format_tick(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.3g}"
    return str(value)


def _draw_line(ax: Any, spec: LineChartSpec) -> None:
    if spec.is_categorical:
        positions = np.arange(len(spec.x))
        if spec.y is not None:
            ax.bar(positions, spec.y, color=PDP_COLOR, alpha=0.8, label="PDP")
        for curve in spec.ice or []:
            ax.plot(positions, curve, color=ICE_COLOR, alpha=0.3, marker="o", linewidth=0.8)
        ax.set_xticks(positions)
        ax.set_xticklabels([str(level) for level in spec.x], rotation=30, ha="right")
    else:
        for curve in spec.ice or []:
            ax.plot(spec.x, curve, color=ICE_COLOR, alpha=0.3, linewidth=0.8)
        if spec.y is not None:
            ax.plot(spec.x, spec.y, color=PDP_COLOR, linewidth=2.0, label="PDP")
    if spec.center_at is not None:
        ax.axhline(0.0, color="black", linestyle=":", linewidth=0.8)
    ax.set_xlabel(spec.xlabel)
    ax.set_ylabel(spec.ylabel)
    if spec.title:
        ax.set_title(spec.title)


def _draw_surface(ax: Any, spec: SurfaceChartSpec) -> Any:
    z = np.asarray(spec.z, dtype=float)
    image = ax.imshow(z.T, origin="lower", aspect="auto", cmap="viridis", interpolation="nearest")
    for values, set_ticks, set_labels in (
        (spec.x, ax.set_xticks, ax.set_xticklabels),
        (spec.y, ax.set_yticks, ax.set_yticklabels),
    ):
        ticks = _tick_positions(len(values))
        set_ticks(ticks)
        set_labels([_format_tick(values[i]) for i in ticks])
    ax.set_xlabel(spec.xlabel)
    ax.set_ylabel(spec.ylabel)
    if spec.title:
        ax.set_title(spec.title)
    return image


def render(
    specs: ChartSpec | Sequence[ChartSpec],
    *,
    show: bool = False,
    save_path: str | None = None,
    return_fig: bool = False,
    ncols: int = 2,
    figure_size: tuple[float, float] | None = None,
):
    """Render one or more chart specs into a single matplotlib figure.

    If ``show`` is False, ``save_path`` is None and ``return_fig`` is False
    this is a no-op, so callers can build specs without a display.
    """
    if not show and not save_path and not return_fig:
        return None
    if isinstance(specs, (LineChartSpec, SurfaceChartSpec)):
        specs = [specs]
    specs = list(specs)
    if not specs:
        raise ValidationError("render needs at least one chart spec", details={"n_specs": 0})

    import matplotlib.pyplot as plt  # pylint: disable=import-outside-toplevel

    ncols = max(1, min(ncols, len(specs)))
    nrows = math.ceil(len(specs) / ncols)
    size = figure_size or (5.0 * ncols, 4.0 * nrows)
    fig, axes = plt.subplots(nrows, ncols, figsize=size, squeeze=False)
    flat = axes.ravel()
    for ax, spec in zip(flat, specs):
        if isinstance(spec, SurfaceChartSpec):
            image = _draw_surface(ax, spec)
            fig.colorbar(image, ax=ax, label=spec.zlabel)
        elif isinstance(spec, LineChartSpec):
            _draw_line(ax, spec)
        else:
            plt.close(fig)
            raise ValidationError(
                f"Cannot render object of type {type(spec).__name__}",
                details={"type": type(spec).__name__},
            )
    for ax in flat[len(specs):]:
        ax.set_visible(False)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, bbox_inches="tight")
    if show:
        plt.show()
    if return_fig:
        return fig
    plt.close(fig)
    return None


__all__ = ["render", "PDP_COLOR", "ICE_COLOR"]
