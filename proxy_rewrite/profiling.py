"""Timing instrumentation for the rewrite hot path.

``@profile_operation(name)`` times a call with ``perf_counter_ns``, logs the
duration at DEBUG level and records it in the :class:`ProfileCollector`
singleton, which keeps the most recent results per operation::

    @profile_operation("sql.rewrite")
    def rewrite(...):
        ...

    ProfileCollector.get_instance().get_stats("sql.rewrite")
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class ProfileResult:
    """One timed call."""

    operation: str
    duration_ms: float
    succeeded: bool = True


class ProfileCollector:
    """Thread-safe store of recent :class:`ProfileResult` per operation.

    Parameters
    ----------
    max_results:
        How many results to keep per operation name.
    """

    _instance: ProfileCollector | None = None
    _instance_lock = threading.Lock()

    def __init__(self, max_results: int = 256) -> None:
        self._max_results = max_results
        self._results: dict[str, deque[ProfileResult]] = {}
        self._lock = threading.Lock()
        self.enabled = True

    @classmethod
    def get_instance(cls) -> ProfileCollector:
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = ProfileCollector()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton.  **For testing only.**"""
        with cls._instance_lock:
            cls._instance = None

    def record(self, result: ProfileResult) -> None:
        if not self.enabled:
            return
        with self._lock:
            bucket = self._results.setdefault(result.operation, deque(maxlen=self._max_results))
            bucket.append(result)

    def get_stats(self, operation: str) -> dict[str, Any] | None:
        """Aggregate the retained durations of *operation*.

        Returns ``None`` when nothing was recorded, otherwise a dict with
        ``count``, ``failures``, ``mean_ms``, ``p50_ms``, ``p95_ms``,
        ``p99_ms`` and ``max_ms``.
        """
        with self._lock:
            results = list(self._results.get(operation, ()))
        if not results:
            return None

        durations = sorted(r.duration_ms for r in results)
        return {
            "operation": operation,
            "count": len(durations),
            "failures": sum(1 for r in results if not r.succeeded),
            "mean_ms": round(sum(durations) / len(durations), 3),
            "p50_ms": round(_percentile(durations, 50), 3),
            "p95_ms": round(_percentile(durations, 95), 3),
            "p99_ms": round(_percentile(durations, 99), 3),
            "max_ms": round(durations[-1], 3),
        }

    def operations(self) -> list[str]:
        with self._lock:
            return sorted(self._results)

    def clear(self) -> None:
        with self._lock:
            self._results.clear()


def _percentile(sorted_data: list[float], p: float) -> float:
    # linear interpolation between closest ranks
    k = (p / 100.0) * (len(sorted_data) - 1)
    lower = int(k)
    upper = min(lower + 1, len(sorted_data) - 1)
    return sorted_data[lower] + (k - lower) * (sorted_data[upper] - sorted_data[lower])


def profile_operation(name: str) -> Callable[[F], F]:
    """Time every call of the decorated function under *name*.

    Calls that raise are recorded too, flagged with ``succeeded=False``;
    the exception propagates unchanged.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_ns = time.perf_counter_ns()
            succeeded = False
            try:
                result = func(*args, **kwargs)
                succeeded = True
                return result
            finally:
                duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
                ProfileCollector.get_instance().record(
                    ProfileResult(operation=name, duration_ms=round(duration_ms, 3), succeeded=succeeded)
                )
                logger.debug("PROFILE %s: %.3f ms (ok=%s)", name, duration_ms, succeeded)

        return wrapper  # type: ignore[return-value]

    return decorator
