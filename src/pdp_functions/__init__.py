"""
pdp_functions.

Partial dependence functions for any fitted predictive model: wrap the model
in a :class:`Predictor`, build an :class:`Interpreter` to compute one callable
PDP function per feature (and per requested feature pair), and use a
:class:`Plotter` to turn them into backend-agnostic chart specs.
"""

import importlib
import logging as _logging

# Provide a default no-op handler to avoid "No handler" warnings for library users.
_logging.getLogger(__name__).addHandler(_logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ICECurves",
    "Interpreter",
    "InterpreterBuilder",
    "InterpreterConfig",
    "PDPFunction1D",
    "PDPFunction2D",
    "Plotter",
    "Predictor",
    "Task",
    "plot",
    "set_center_at",
]

_NAME_TO_MODULE = {
    "ICECurves": ("core.pdp_function", "ICECurves"),
    "Interpreter": ("core.interpreter", "Interpreter"),
    "InterpreterBuilder": ("api.config", "InterpreterBuilder"),
    "InterpreterConfig": ("api.config", "InterpreterConfig"),
    "PDPFunction1D": ("core.pdp_function", "PDPFunction1D"),
    "PDPFunction2D": ("core.pdp_function", "PDPFunction2D"),
    "Plotter": ("viz.plotter", "Plotter"),
    "Predictor": ("core.predictor", "Predictor"),
    "Task": ("core.predictor", "Task"),
    "plot": ("viz.plotter", "plot"),
    "set_center_at": ("viz.plotter", "set_center_at"),
}
_NAME_TO_MODULE.update(
    {
        name: ("utils.exceptions", name)
        for name in (
            "ConfigurationError",
            "EmptyTrainingDataError",
            "InvalidFeatureError",
            "InvalidPredictionError",
            "InvalidTaskError",
            "ModelInvocationError",
            "ModelNotSupportedError",
            "NotFittedError",
            "PartialDependenceError",
            "SchemaMismatchError",
            "UnknownLevelError",
            "ValidationError",
        )
    }
)
__all__ += sorted(name for name in _NAME_TO_MODULE if name not in __all__)


def __getattr__(name: str):
    """Lazily import the public API so ``import pdp_functions`` stays cheap."""
    if name not in _NAME_TO_MODULE:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _NAME_TO_MODULE[name]
    module = importlib.import_module(f"{__name__}.{module_name}")
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
