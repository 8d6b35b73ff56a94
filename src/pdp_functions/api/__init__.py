"""Public configuration API."""

from .config import InterpreterBuilder, InterpreterConfig

__all__ = ["InterpreterBuilder", "InterpreterConfig"]
