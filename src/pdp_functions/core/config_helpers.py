"""Configuration parsing and coercion utilities.

Helpers for reading ``[tool.pdp_functions]`` sections from ``pyproject.toml``
and for coercing environment variable strings.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, Sequence

from ..utils.exceptions import ConfigurationError


def read_pyproject_section(path: Sequence[str]) -> Dict[str, Any]:
    """Return a mapping from the requested ``pyproject.toml`` section.

    Parameters
    ----------
    path : Sequence[str]
        Nested keys to traverse in the pyproject.toml structure.
        For example, ``("tool", "pdp_functions")`` navigates to
        ``[tool.pdp_functions]``.

    Returns
    -------
    Dict[str, Any]
        The requested section, or an empty dict if the file does not exist
        or the section is absent.
    """
    candidate = Path.cwd() / "pyproject.toml"
    if not candidate.exists():
        return {}
    try:
        with candidate.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(
            f"Could not parse {candidate}: {exc}", details={"path": str(candidate)}
        ) from exc

    cursor: Any = data
    for key in path:
        if isinstance(cursor, dict) and key in cursor:
            cursor = cursor[key]
        else:
            return {}
    if isinstance(cursor, dict):
        return dict(cursor)
    return {}


def coerce_bool(value: str | bool | None) -> bool:
    """Interpret common truthy strings (``1``, ``true``, ``yes``, ``on``)."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on", "enable"}


def coerce_int(value: Any, name: str) -> int:
    """Convert ``value`` to ``int`` or raise :class:`ConfigurationError`."""
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Setting '{name}' must be an integer, got {value!r}.",
            details={"setting": name, "value": value},
        ) from exc


def coerce_optional_int(value: Any, name: str) -> int | None:
    """Like :func:`coerce_int` but maps ``None``/``""``/``"none"`` to ``None``."""
    if value is None or (isinstance(value, str) and value.strip().lower() in {"", "none", "all"}):
        return None
    return coerce_int(value, name)


__all__ = [
    "read_pyproject_section",
    "coerce_bool",
    "coerce_int",
    "coerce_optional_int",
]
