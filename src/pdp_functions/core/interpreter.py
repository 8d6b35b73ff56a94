"""Interpreter: partial dependence functions for every feature of a Predictor.

For a grid value ``v`` of feature ``F`` the partial dependence is

    pdp(v) = mean over rows i of predict(x_i with F := v)

computed over the (optionally subsampled) training rows. Averaging over the
observed joint distribution of the remaining features isolates the marginal
effect of ``F`` without assuming independence. Pairs work the same way with
two columns overwritten at once.

Cost is one batch prediction of ``n`` rows per grid point, so a feature costs
``|grid| * n`` model evaluations. Grid points are independent and may be
mapped over a :class:`~pdp_functions.parallel.ParallelExecutor`.
"""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from ..api.config import InterpreterConfig
from ..logging import diagnostic_mode, ensure_logging_context_filter, logging_context
from ..parallel import ParallelExecutor
from ..utils.exceptions import EmptyTrainingDataError, InvalidFeatureError
from .grid import GridBuilder, assign_values
from .pdp_function import ICECurves, PDPFunction1D, PDPFunction2D
from .predictor import Predictor

logger = logging.getLogger(__name__)
ensure_logging_context_filter(__name__)

PairKey = Tuple[str, str]


class _GridPointTask:
    """Predict the batch with ``features`` overwritten by one grid point.

    Returns the mean prediction and the predictions of the ICE rows. Kept as
    a module-level class so the process strategy can pickle it.
    """

    def __init__(
        self,
        predictor: Predictor,
        frame: pd.DataFrame,
        features: Sequence[str],
        ice_positions: np.ndarray,
        diagnostics: bool = False,
    ) -> None:
        self.predictor = predictor
        self.frame = frame
        self.features = tuple(features)
        self.ice_positions = ice_positions
        self.diagnostics = diagnostics

    def __call__(self, point: Sequence[Any]) -> Tuple[float, np.ndarray]:
        start = time.perf_counter() if self.diagnostics else 0.0
        batch = assign_values(self.frame, dict(zip(self.features, point)))
        predictions = self.predictor.predict(batch)
        if self.diagnostics:
            logger.debug(
                "Grid point %r for %s: %d rows in %.4fs",
                tuple(point),
                self.features,
                len(batch),
                time.perf_counter() - start,
            )
        return float(np.mean(predictions)), predictions[self.ice_positions]


class Interpreter:
    """Compute and hold the PDP functions of a :class:`Predictor`.

    All 1D functions are built eagerly at construction; pair functions only
    for ``pairs`` and later :meth:`add_pair` calls, since the pair space
    grows quadratically.

    Parameters
    ----------
    predictor : Predictor
        The frozen model and training snapshot. The Interpreter keeps a
        reference and never mutates it.
    pairs : iterable of (str, str), optional
        Feature pairs to compute at construction.
    config : InterpreterConfig, optional
        Grid and sampling settings. Defaults to
        :meth:`InterpreterConfig.from_sources`.
    grid_points : mapping, optional
        Explicit grid values per feature (see :class:`GridBuilder`).

    Raises
    ------
    EmptyTrainingDataError
        If the Predictor holds no rows.
    InvalidFeatureError
        If a requested pair names an unknown feature or the outcome.
    """

    def __init__(
        self,
        predictor: Predictor,
        pairs: Iterable[Tuple[str, str]] = (),
        *,
        config: InterpreterConfig | None = None,
        grid_points: Mapping[str, Sequence[Any]] | None = None,
    ) -> None:
        if predictor.n_rows == 0:
            raise EmptyTrainingDataError(
                "Cannot compute partial dependence without training rows.",
                details={"predictor": repr(predictor)},
            )
        self._config = (config or InterpreterConfig.from_sources()).validate()
        self._predictor = predictor
        self._predictor_id = f"{type(predictor.model).__name__}@{id(predictor):x}"
        self._builder = GridBuilder(
            predictor,
            grid_size=self._config.grid_size,
            grid_size_2d=self._config.grid_size_2d,
            method=self._config.grid_method,
            grid_points=grid_points,
        )
        self._executor = ParallelExecutor(self._config.parallel)
        self._diagnostics = diagnostic_mode()

        rng = np.random.default_rng(self._config.seed)
        n = predictor.n_rows
        samples = self._config.samples
        if samples is not None and samples < n:
            self._sample_index = np.sort(rng.choice(n, size=samples, replace=False))
        else:
            self._sample_index = np.arange(n)
        n_ice = min(self._config.ice_points, len(self._sample_index))
        self._ice_positions = np.sort(rng.choice(len(self._sample_index), size=n_ice, replace=False))
        self._frame = predictor.feature_frame().iloc[self._sample_index].reset_index(drop=True)

        self._functions_1d: Dict[str, PDPFunction1D] = {}
        self._ice_1d: Dict[str, ICECurves] = {}
        self._functions_2d: Dict[PairKey, PDPFunction2D] = {}

        with logging_context(predictor_id=self._predictor_id, stage="build"):
            for name in predictor.features:
                self._functions_1d[name], self._ice_1d[name] = self._compute_1d(name)
            for first, second in pairs:
                self.add_pair(first, second)
        logger.info(
            "Built %d 1D and %d 2D partial dependence functions over %d rows",
            len(self._functions_1d),
            len(self._functions_2d),
            len(self._frame),
        )

    def __repr__(self) -> str:
        return (
            f"Interpreter(predictor={self._predictor!r}, n_1d={len(self._functions_1d)}, "
            f"n_2d={len(self._functions_2d)}, n_rows={len(self._frame)})"
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def predictor(self) -> Predictor:
        return self._predictor

    @property
    def config(self) -> InterpreterConfig:
        return self._config

    @property
    def features(self) -> Tuple[str, ...]:
        return self._predictor.features

    @property
    def functions_1d(self) -> Mapping[str, PDPFunction1D]:
        """Feature name to PDP function, in training column order."""
        return MappingProxyType(self._functions_1d)

    @property
    def functions_2d(self) -> Mapping[PairKey, PDPFunction2D]:
        """Registered pairs, keyed by names in training column order."""
        return MappingProxyType(self._functions_2d)

    @property
    def ice_1d(self) -> Mapping[str, ICECurves]:
        return MappingProxyType(self._ice_1d)

    @property
    def sample_index(self) -> np.ndarray:
        """Positions of the training rows used for marginalization."""
        return self._sample_index.copy()

    # ------------------------------------------------------------------
    # Lookup and registration
    # ------------------------------------------------------------------
    def pdp(self, feature: str) -> PDPFunction1D:
        """Return the PDP function of ``feature``."""
        return self._functions_1d[self._predictor.check_feature(feature)]

    def ice(self, feature: str) -> ICECurves:
        return self._ice_1d[self._predictor.check_feature(feature)]

    def pair_key(self, first: str, second: str) -> PairKey:
        """Canonical key of an unordered pair: names in training column order."""
        self._predictor.check_feature(first)
        self._predictor.check_feature(second)
        if first == second:
            raise InvalidFeatureError(
                f"A feature pair needs two distinct features, got '{first}' twice.",
                details={"pair": (first, second)},
            )
        order = self._predictor.features
        if order.index(first) <= order.index(second):
            return (first, second)
        return (second, first)

    def add_pair(self, first: str, second: str) -> PDPFunction2D:
        """Register the pair and return its function oriented as ``(first, second)``.

        Registering a pair that already exists, in either order, reuses the
        stored function.
        """
        key = self.pair_key(first, second)
        if key not in self._functions_2d:
            with logging_context(predictor_id=self._predictor_id, pair=key, stage="pair"):
                self._functions_2d[key] = self._compute_2d(*key)
        else:
            logger.debug("Pair %s already registered", key)
        function = self._functions_2d[key]
        return function if key == (first, second) else function.transpose()

    pdp_2d = add_pair

    def has_pair(self, first: str, second: str) -> bool:
        return self.pair_key(first, second) in self._functions_2d

    # ------------------------------------------------------------------
    # Marginalization
    # ------------------------------------------------------------------
    def _marginalize(
        self, features: Sequence[str], points: Sequence[Tuple[Any, ...]], ice_positions: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        task = _GridPointTask(
            self._predictor, self._frame, features, ice_positions, self._diagnostics
        )
        results = self._executor.map(task, points)
        means = np.array([mean for mean, _ in results], dtype=float)
        ice = np.array([rows for _, rows in results], dtype=float).reshape(len(points), len(ice_positions))
        return means, ice

    def _compute_1d(self, name: str) -> Tuple[PDPFunction1D, ICECurves]:
        with logging_context(feature=name):
            grid = self._builder.grid(name)
            logger.debug("Marginalizing '%s' over %d grid points", name, len(grid))
            means, ice = self._marginalize([name], [(v,) for v in grid], self._ice_positions)
        return (
            PDPFunction1D(grid, means),
            ICECurves(grid, ice.T, self._sample_index[self._ice_positions]),
        )

    def _compute_2d(self, first: str, second: str) -> PDPFunction2D:
        grid = self._builder.pair_grid(first, second)
        logger.debug("Marginalizing pair (%s, %s) over %d grid points", first, second, len(grid))
        means, _ = self._marginalize([first, second], list(grid), np.empty(0, dtype=int))
        return PDPFunction2D(grid, means.reshape(grid.shape))

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------
    def summary(self) -> pd.DataFrame:
        """One row per feature: kind, grid size and the range of its PDP."""
        rows = []
        for name, function in self._functions_1d.items():
            values = function.values
            rows.append(
                {
                    "feature": name,
                    "kind": function.kind.value,
                    "n_grid": len(values),
                    "pdp_min": float(values.min()),
                    "pdp_max": float(values.max()),
                    "pdp_range": float(values.max() - values.min()),
                }
            )
        return pd.DataFrame(rows).set_index("feature")


__all__ = ["Interpreter", "PairKey"]
