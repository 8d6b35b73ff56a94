"""Parallel execution entry points.

Only the executor facade and its configuration are re-exported.
"""

from __future__ import annotations

from .parallel import ParallelConfig, ParallelExecutor, ParallelMetrics

__all__ = (
    "ParallelConfig",
    "ParallelExecutor",
    "ParallelMetrics",
)
