"""Configuration primitives for pdp_functions.

:class:`InterpreterConfig` holds the knobs of a partial dependence run and
:class:`InterpreterBuilder` assembles one fluently. Settings are resolved
from dataclass defaults, then ``[tool.pdp_functions]`` in ``pyproject.toml``,
then ``PDP_*`` environment variables (highest precedence).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, Iterable, Literal, Tuple

from ..core.config_helpers import coerce_int, coerce_optional_int, read_pyproject_section
from ..parallel import ParallelConfig
from ..utils.exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..core.interpreter import Interpreter
    from ..core.predictor import Predictor

GridMethodLiteral = Literal["uniform", "quantile"]

_ENV_KEYS = {
    "grid_size": "PDP_GRID_SIZE",
    "grid_size_2d": "PDP_GRID_SIZE_2D",
    "grid_method": "PDP_GRID_METHOD",
    "samples": "PDP_SAMPLES",
    "ice_points": "PDP_ICE_POINTS",
    "seed": "PDP_SEED",
}


@dataclass
class InterpreterConfig:
    """Configuration for building an :class:`~pdp_functions.Interpreter`.

    Attributes
    ----------
    grid_size : int
        Points per continuous feature in a 1D grid.
    grid_size_2d : int
        Points per continuous axis in a pair grid.
    grid_method : {"uniform", "quantile"}
        Spacing of generated continuous grids.
    samples : int or None
        Number of training rows marginalized over; ``None`` uses all rows.
    ice_points : int
        Number of rows whose individual curves are kept; ``0`` disables ICE.
    seed : int
        Seed for the row subsamples, which makes runs reproducible.
    parallel : ParallelConfig
        Optional parallel evaluation of grid points.
    """

    grid_size: int = 51
    grid_size_2d: int = 21
    grid_method: GridMethodLiteral = "uniform"
    samples: int | None = None
    ice_points: int = 10
    seed: int = 0
    parallel: ParallelConfig = field(default_factory=ParallelConfig)

    def validate(self) -> "InterpreterConfig":
        """Raise :class:`ConfigurationError` for out-of-range settings."""
        problems: Dict[str, Any] = {}
        if self.grid_size < 2:
            problems["grid_size"] = self.grid_size
        if self.grid_size_2d < 2:
            problems["grid_size_2d"] = self.grid_size_2d
        if self.grid_method not in ("uniform", "quantile"):
            problems["grid_method"] = self.grid_method
        if self.samples is not None and self.samples < 1:
            problems["samples"] = self.samples
        if self.ice_points < 0:
            problems["ice_points"] = self.ice_points
        if problems:
            raise ConfigurationError(
                f"Invalid interpreter configuration: {problems}", details=problems
            )
        return self

    @classmethod
    def from_sources(cls, base: "InterpreterConfig | None" = None) -> "InterpreterConfig":
        """Overlay pyproject and environment settings on ``base`` (or defaults)."""
        cfg = replace(base) if base is not None else cls()
        section = read_pyproject_section(("tool", "pdp_functions"))
        overrides: Dict[str, Any] = {
            key: section[key] for key in _ENV_KEYS if key in section
        }
        for key, env_name in _ENV_KEYS.items():
            raw = os.environ.get(env_name)
            if raw is not None:
                overrides[key] = raw
        for key, value in overrides.items():
            setattr(cfg, key, _coerce(key, value))
        cfg.parallel = ParallelConfig.from_env(cfg.parallel)
        return cfg.validate()


def _coerce(key: str, value: Any) -> Any:
    if key == "grid_method":
        return str(value).strip().lower()
    if key == "samples":
        return coerce_optional_int(value, key)
    return coerce_int(value, key)


class InterpreterBuilder:
    """Fluent helper to assemble an :class:`InterpreterConfig` and an Interpreter."""

    def __init__(self, predictor: "Predictor") -> None:
        self._predictor = predictor
        self._cfg = InterpreterConfig()
        self._pairs: list[Tuple[str, str]] = []
        self._grid_points: Dict[str, Any] = {}

    def grid_size(self, n: int) -> "InterpreterBuilder":
        self._cfg.grid_size = n
        return self

    def grid_size_2d(self, n: int) -> "InterpreterBuilder":
        self._cfg.grid_size_2d = n
        return self

    def grid_method(self, method: GridMethodLiteral) -> "InterpreterBuilder":
        self._cfg.grid_method = method
        return self

    def samples(self, n: int | None) -> "InterpreterBuilder":
        """Marginalize over a seeded subsample of ``n`` rows (``None`` for all)."""
        self._cfg.samples = n
        return self

    def ice_points(self, n: int) -> "InterpreterBuilder":
        self._cfg.ice_points = n
        return self

    def seed(self, seed: int) -> "InterpreterBuilder":
        self._cfg.seed = seed
        return self

    def parallel(
        self,
        enabled: bool,
        *,
        strategy: str | None = None,
        workers: int | None = None,
        min_batch: int | None = None,
    ) -> "InterpreterBuilder":
        """Configure parallel evaluation of grid points."""
        self._cfg.parallel.enabled = enabled
        if strategy is not None:
            self._cfg.parallel.strategy = strategy  # type: ignore[assignment]
        if workers is not None:
            self._cfg.parallel.max_workers = workers
        if min_batch is not None:
            self._cfg.parallel.min_batch_size = min_batch
        return self

    def pairs(self, pairs: Iterable[Tuple[str, str]]) -> "InterpreterBuilder":
        self._pairs.extend(tuple(p) for p in pairs)  # type: ignore[misc]
        return self

    def grid_points(self, feature: str, values: Iterable[Any]) -> "InterpreterBuilder":
        self._grid_points[feature] = list(values)
        return self

    def build_config(self) -> InterpreterConfig:
        """Return the validated configuration (no side effects)."""
        return replace(self._cfg, parallel=replace(self._cfg.parallel)).validate()

    def build(self) -> "Interpreter":
        """Compute all 1D functions and the requested pairs."""
        from ..core.interpreter import Interpreter  # pylint: disable=import-outside-toplevel

        return Interpreter(
            self._predictor,
            self._pairs,
            config=self.build_config(),
            grid_points=self._grid_points or None,
        )


__all__ = [
    "InterpreterConfig",
    "InterpreterBuilder",
    "GridMethodLiteral",
]
