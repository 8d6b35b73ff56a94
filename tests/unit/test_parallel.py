"""Unit tests for the ParallelExecutor facade."""

from unittest.mock import patch

import pytest

from pdp_functions.parallel import ParallelConfig, ParallelExecutor, ParallelMetrics
from pdp_functions.utils.exceptions import ModelInvocationError


def _square(value):
    return value * value


class TestParallelConfig:
    """Tests for configuration loading and environment overrides."""

    def test_defaults(self):
        cfg = ParallelConfig()
        assert not cfg.enabled
        assert cfg.strategy == "auto"
        assert cfg.max_workers is None
        assert cfg.min_batch_size == 8

    @pytest.mark.parametrize("raw", ["1", "true", "on", "enable"])
    def test_from_env_enable_flag(self, monkeypatch, raw):
        monkeypatch.setenv("PDP_PARALLEL", raw)
        assert ParallelConfig.from_env().enabled

    def test_from_env_disable_flag(self, monkeypatch):
        monkeypatch.setenv("PDP_PARALLEL", "0")
        cfg = ParallelConfig.from_env(ParallelConfig(enabled=True))
        assert not cfg.enabled

    def test_from_env_complex_string(self, monkeypatch):
        monkeypatch.setenv("PDP_PARALLEL", "threads, workers=3, min_batch=2, bogus")
        cfg = ParallelConfig.from_env()
        assert cfg.enabled
        assert cfg.strategy == "threads"
        assert cfg.max_workers == 3
        assert cfg.min_batch_size == 2

    def test_from_env_does_not_mutate_base(self, monkeypatch):
        monkeypatch.setenv("PDP_PARALLEL", "joblib")
        base = ParallelConfig()
        cfg = ParallelConfig.from_env(base)
        assert cfg.strategy == "joblib"
        assert base.strategy == "auto"
        assert not base.enabled

    def test_unset_env_returns_copy(self):
        base = ParallelConfig(enabled=True, strategy="threads")
        cfg = ParallelConfig.from_env(base)
        assert cfg == base
        assert cfg is not base


class TestParallelExecutor:
    """Tests for strategy dispatch and fallback."""

    def test_disabled_runs_sequentially(self):
        executor = ParallelExecutor(ParallelConfig(enabled=False))
        assert executor.map(_square, range(20)) == [i * i for i in range(20)]
        assert executor.metrics.submitted == 0

    def test_small_batches_run_sequentially(self):
        executor = ParallelExecutor(ParallelConfig(enabled=True, strategy="threads", min_batch_size=10))
        assert executor.map(_square, [1, 2, 3]) == [1, 4, 9]
        assert executor.metrics.submitted == 0

    @pytest.mark.parametrize("strategy", ["threads", "joblib", "sequential"])
    def test_strategies_preserve_order(self, strategy):
        executor = ParallelExecutor(
            ParallelConfig(enabled=True, strategy=strategy, max_workers=2, min_batch_size=1)
        )
        assert executor.map(_square, range(25)) == [i * i for i in range(25)]
        assert executor.metrics.submitted == 25
        assert executor.metrics.completed == 25

    def test_auto_strategy_prefers_threads_on_small_hosts(self):
        executor = ParallelExecutor(ParallelConfig(enabled=True))
        with patch("pdp_functions.parallel.parallel.os.cpu_count", return_value=2):
            assert executor._auto_strategy() == "threads"  # pylint: disable=protected-access

    def test_library_errors_propagate(self):
        def fail(_):
            raise ModelInvocationError("model failed")

        executor = ParallelExecutor(ParallelConfig(enabled=True, strategy="threads", min_batch_size=1))
        with pytest.raises(ModelInvocationError):
            executor.map(fail, range(4))
        assert executor.metrics.failures == 1
        assert executor.metrics.fallbacks == 0

    def test_pool_failures_fall_back_to_sequential(self, caplog):
        executor = ParallelExecutor(ParallelConfig(enabled=True, strategy="threads", min_batch_size=1))
        with patch.object(executor, "_thread_strategy", side_effect=OSError("no threads")):
            with caplog.at_level("WARNING", logger="pdp_functions.parallel.parallel"):
                results = executor.map(_square, range(5))
        assert results == [0, 1, 4, 9, 16]
        assert executor.metrics.fallbacks == 1
        assert "running sequentially" in caplog.text


def test_metrics_snapshot():
    metrics = ParallelMetrics(submitted=3, completed=2, fallbacks=1, failures=1)
    assert metrics.snapshot() == {"submitted": 3, "completed": 2, "fallbacks": 1, "failures": 1}
