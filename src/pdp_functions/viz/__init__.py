"""Visualization namespace: Plotter, chart specs, serializers and the matplotlib adapter."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = (
    "CHARTSPEC_VERSION",
    "LineChartSpec",
    "Plotter",
    "SurfaceChartSpec",
    "chartspec_from_dict",
    "chartspec_to_dict",
    "matplotlib_adapter",
    "plot",
    "render",
    "set_center_at",
    "validate_chartspec",
)

_NAME_TO_MODULE = {
    "CHARTSPEC_VERSION": ("chartspec", "CHARTSPEC_VERSION"),
    "LineChartSpec": ("chartspec", "LineChartSpec"),
    "SurfaceChartSpec": ("chartspec", "SurfaceChartSpec"),
    "Plotter": ("plotter", "Plotter"),
    "plot": ("plotter", "plot"),
    "set_center_at": ("plotter", "set_center_at"),
    "chartspec_to_dict": ("serializers", "chartspec_to_dict"),
    "chartspec_from_dict": ("serializers", "chartspec_from_dict"),
    "validate_chartspec": ("serializers", "validate_chartspec"),
    "render": ("matplotlib_adapter", "render"),
    "matplotlib_adapter": ("matplotlib_adapter", None),
}


def __getattr__(name: str) -> Any:
    """Lazily load chart specs, the Plotter and the matplotlib adapter."""
    if name not in __all__:
        raise AttributeError(name)
    module_name, attr_name = _NAME_TO_MODULE[name]
    module = import_module(f"{__name__}.{module_name}")
    value = module if attr_name is None else getattr(module, attr_name)
    globals()[name] = value
    return value
