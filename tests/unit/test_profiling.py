"""Tests for rewrite profiling.

Covers the ``@profile_operation`` decorator, the ``ProfileCollector``
singleton and the timings recorded by the rewrite engine itself.
"""

from __future__ import annotations

import logging
import threading

import pytest

from proxy_rewrite.engine import rewrite
from proxy_rewrite.errors import SchemaNotFoundError
from proxy_rewrite.profiling import ProfileCollector, ProfileResult, profile_operation
from proxy_rewrite.tokens import SchemaToken

# ---------------------------------------------------------------------------
# ProfileCollector
# ---------------------------------------------------------------------------


class TestProfileCollector:
    def test_singleton_identity(self) -> None:
        assert ProfileCollector.get_instance() is ProfileCollector.get_instance()

    def test_reset_creates_new_instance(self) -> None:
        first = ProfileCollector.get_instance()
        ProfileCollector.reset()
        assert ProfileCollector.get_instance() is not first

    def test_no_stats_for_unknown_operation(self) -> None:
        assert ProfileCollector().get_stats("nothing") is None

    def test_stats(self) -> None:
        collector = ProfileCollector()
        for ms in (1.0, 2.0, 3.0, 4.0):
            collector.record(ProfileResult(operation="op", duration_ms=ms))
        collector.record(ProfileResult(operation="op", duration_ms=5.0, succeeded=False))
        stats = collector.get_stats("op")
        assert stats is not None
        assert stats["count"] == 5
        assert stats["failures"] == 1
        assert stats["mean_ms"] == 3.0
        assert stats["p50_ms"] == 3.0
        assert stats["max_ms"] == 5.0

    def test_max_results_bound(self) -> None:
        collector = ProfileCollector(max_results=3)
        for ms in range(10):
            collector.record(ProfileResult(operation="op", duration_ms=float(ms)))
        stats = collector.get_stats("op")
        assert stats is not None
        assert stats["count"] == 3
        assert stats["max_ms"] == 9.0

    def test_disabled_collector_drops_results(self) -> None:
        collector = ProfileCollector()
        collector.enabled = False
        collector.record(ProfileResult(operation="op", duration_ms=1.0))
        assert collector.operations() == []

    def test_clear(self) -> None:
        collector = ProfileCollector()
        collector.record(ProfileResult(operation="op", duration_ms=1.0))
        collector.clear()
        assert collector.get_stats("op") is None

    def test_concurrent_records(self) -> None:
        collector = ProfileCollector(max_results=10_000)

        def worker() -> None:
            for _ in range(200):
                collector.record(ProfileResult(operation="op", duration_ms=0.1))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        stats = collector.get_stats("op")
        assert stats is not None
        assert stats["count"] == 1600


# ---------------------------------------------------------------------------
# Decorator
# ---------------------------------------------------------------------------


class TestProfileOperation:
    def test_records_and_returns(self) -> None:
        @profile_operation("test.add")
        def add(a: int, b: int) -> int:
            return a + b

        assert add(2, 3) == 5
        assert ProfileCollector.get_instance().get_stats("test.add")["count"] == 1

    def test_preserves_metadata(self) -> None:
        @profile_operation("test.named")
        def named() -> None:
            """Docstring."""

        assert named.__name__ == "named"
        assert named.__doc__ == "Docstring."

    def test_failure_recorded_and_reraised(self) -> None:
        @profile_operation("test.fail")
        def fail() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            fail()
        assert ProfileCollector.get_instance().get_stats("test.fail")["failures"] == 1

    def test_debug_log_emitted(self, caplog: pytest.LogCaptureFixture) -> None:
        @profile_operation("test.logging")
        def noop() -> None:
            return None

        with caplog.at_level(logging.DEBUG, logger="proxy_rewrite.profiling"):
            noop()
        assert any("PROFILE test.logging" in record.message for record in caplog.records)


# ---------------------------------------------------------------------------
# Engine instrumentation
# ---------------------------------------------------------------------------


class TestRewriteProfiling:
    def test_rewrite_and_resolve_recorded(self, master_slave_rule, metadata) -> None:
        sql = "SELECT * FROM user_db.orders"
        rewrite(sql, [SchemaToken(14, "user_db", schema_name="user_db")], master_slave_rule, metadata)
        collector = ProfileCollector.get_instance()
        assert collector.operations() == ["sql.resolve", "sql.rewrite"]

    def test_fast_path_skips_resolve(self, master_slave_rule, metadata) -> None:
        rewrite("SELECT 1", [], master_slave_rule, metadata)
        assert ProfileCollector.get_instance().operations() == ["sql.rewrite"]

    def test_failed_rewrite_recorded(self, master_slave_rule, metadata) -> None:
        sql = "SELECT * FROM nowhere.orders"
        with pytest.raises(SchemaNotFoundError):
            rewrite(sql, [SchemaToken(14, "nowhere", schema_name="nowhere")], master_slave_rule, metadata)
        stats = ProfileCollector.get_instance().get_stats("sql.rewrite")
        assert stats is not None
        assert stats["failures"] == 1
