"""Parallel execution helpers for grid-point marginalization.

Each grid point of a partial dependence computation is an independent work
item that only reads the frozen Predictor, so the items can be mapped over a
thread pool, a process pool or joblib without changing results.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, List, Literal, Mapping, Sequence, TypeVar

from joblib import Parallel, delayed

from ..utils.exceptions import PartialDependenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

StrategyLiteral = Literal["auto", "threads", "processes", "joblib", "sequential"]
_STRATEGIES = {"auto", "threads", "processes", "joblib", "sequential"}


@dataclass
class ParallelMetrics:
    """Counters collected by :class:`ParallelExecutor`."""

    submitted: int = 0
    completed: int = 0
    fallbacks: int = 0
    failures: int = 0

    def snapshot(self) -> Mapping[str, int]:
        """Return the metrics as a serialisable mapping."""
        return {
            "submitted": self.submitted,
            "completed": self.completed,
            "fallbacks": self.fallbacks,
            "failures": self.failures,
        }


@dataclass
class ParallelConfig:
    """Configuration options for the parallel executor."""

    enabled: bool = False
    strategy: StrategyLiteral = "auto"
    max_workers: int | None = None
    min_batch_size: int = 8

    @classmethod
    def from_env(cls, base: "ParallelConfig | None" = None) -> "ParallelConfig":
        """Merge ``PDP_PARALLEL`` overrides with an optional ``base`` configuration."""
        cfg = replace(base) if base is not None else cls()
        raw = os.getenv("PDP_PARALLEL")
        if not raw:
            return cfg
        tokens = [segment.strip() for segment in raw.split(",") if segment.strip()]
        for token in tokens:
            lowered = token.lower()
            if lowered in {"1", "true", "on", "enable"}:
                cfg.enabled = True
            elif lowered in {"0", "off", "false"}:
                cfg.enabled = False
            elif lowered in _STRATEGIES:
                cfg.strategy = lowered  # type: ignore[assignment]
                cfg.enabled = True
            elif lowered.startswith("workers="):
                cfg.max_workers = max(1, int(token.split("=", 1)[1]))
            elif lowered.startswith("min_batch="):
                cfg.min_batch_size = max(1, int(token.split("=", 1)[1]))
            else:
                logger.warning("Ignoring unknown PDP_PARALLEL token %r", token)
        return cfg


class ParallelExecutor:
    """Facade that selects a strategy and falls back to sequential execution."""

    def __init__(self, config: ParallelConfig | None = None) -> None:
        self.config = config or ParallelConfig()
        self.metrics = ParallelMetrics()

    def map(
        self,
        fn: Callable[[T], R],
        items: Sequence[T] | Iterable[T],
        *,
        workers: int | None = None,
    ) -> List[R]:
        """Execute *fn* across *items* and return results in item order.

        Library errors raised by *fn* propagate unchanged. Failures of the
        pool machinery itself (for example an unpicklable model under the
        process strategy) are logged and the work is redone sequentially.
        """
        items_list = list(items)
        if not self.config.enabled or len(items_list) < max(1, self.config.min_batch_size):
            return [fn(item) for item in items_list]
        self.metrics.submitted += len(items_list)
        strategy = self._resolve_strategy()
        try:
            results = strategy(fn, items_list, workers=workers)
        except PartialDependenceError:
            self.metrics.failures += 1
            raise
        except Exception as exc:  # pylint: disable=broad-except
            self.metrics.failures += 1
            self.metrics.fallbacks += 1
            logger.warning("Parallel execution failed (%r); running sequentially", exc)
            results = [fn(item) for item in items_list]
        self.metrics.completed += len(results)
        return results

    # ------------------------------------------------------------------
    # Strategy selection
    # ------------------------------------------------------------------
    def _resolve_strategy(self) -> Callable[..., List[Any]]:
        strategy = self.config.strategy
        if strategy == "auto":
            strategy = self._auto_strategy()
        if strategy == "threads":
            return self._thread_strategy
        if strategy == "processes":
            return self._process_strategy
        if strategy == "joblib":
            return self._joblib_strategy
        return self._serial_strategy

    def _auto_strategy(self) -> str:
        """Choose a sensible default backend for the current platform."""
        if os.name == "nt":
            return "threads"
        if (os.cpu_count() or 1) <= 2:
            return "threads"
        return "joblib"

    def _max_workers(self, workers: int | None, default: int) -> int:
        return workers or self.config.max_workers or default

    # ------------------------------------------------------------------
    # Individual strategies
    # ------------------------------------------------------------------
    def _serial_strategy(
        self, fn: Callable[[T], R], items: Sequence[T], *, workers: int | None = None
    ) -> List[R]:
        return [fn(item) for item in items]

    def _thread_strategy(
        self, fn: Callable[[T], R], items: Sequence[T], *, workers: int | None = None
    ) -> List[R]:
        max_workers = self._max_workers(workers, min(32, (os.cpu_count() or 1) * 5))
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(fn, items))

    def _process_strategy(
        self, fn: Callable[[T], R], items: Sequence[T], *, workers: int | None = None
    ) -> List[R]:
        max_workers = self._max_workers(workers, os.cpu_count() or 1)
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(fn, items))

    def _joblib_strategy(
        self, fn: Callable[[T], R], items: Sequence[T], *, workers: int | None = None
    ) -> List[R]:
        n_jobs = self._max_workers(workers, -1)
        return list(Parallel(n_jobs=n_jobs, prefer="threads")(delayed(fn)(item) for item in items))


__all__ = ["ParallelConfig", "ParallelExecutor", "ParallelMetrics", "StrategyLiteral"]
