"""Core partial dependence engine: Predictor, grids, Interpreter and PDP functions.

Submodules are imported on attribute access to keep import order free of
cycles with :mod:`pdp_functions.api`.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = (
    "FeatureDescriptor",
    "FeatureKind",
    "Grid",
    "GridBuilder",
    "ICECurves",
    "Interpreter",
    "PDPFunction1D",
    "PDPFunction2D",
    "PairGrid",
    "Predictor",
    "Task",
)

_NAME_TO_MODULE = {
    "FeatureDescriptor": "features",
    "FeatureKind": "features",
    "Grid": "grid",
    "GridBuilder": "grid",
    "ICECurves": "pdp_function",
    "Interpreter": "interpreter",
    "PDPFunction1D": "pdp_function",
    "PDPFunction2D": "pdp_function",
    "PairGrid": "grid",
    "Predictor": "predictor",
    "Task": "predictor",
}


def __getattr__(name: str) -> Any:
    """Lazily expose the core API surface."""
    if name not in _NAME_TO_MODULE:
        raise AttributeError(name)
    module = import_module(f"{__name__}.{_NAME_TO_MODULE[name]}")
    value = getattr(module, name)
    globals()[name] = value
    return value
