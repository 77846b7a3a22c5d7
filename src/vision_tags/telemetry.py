"""Opt-in timings and counters for the recovery pipeline.

`TelemetryContext(*reporters)` hands out a shared no-op object unless
``VISION_TAGS_TELEMETRY=1`` (or ``DEBUG=1``) is set and at least one reporter
is given. Scope names nest per task through a ContextVar, so concurrent
requests never see each other's scope paths.
"""

from collections import defaultdict, deque
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
import logging
import os
import time
from typing import Any, Protocol, Self, TypeAlias, runtime_checkable

log = logging.getLogger(__name__)

_active_scopes: ContextVar[tuple[str, ...]] = ContextVar(
    "vision_tags_scopes", default=()
)


def telemetry_enabled() -> bool:
    """Return True when the environment asks for telemetry."""
    return os.getenv("VISION_TAGS_TELEMETRY") == "1" or os.getenv("DEBUG") == "1"


def _qualified(name: str) -> str:
    return ".".join((*_active_scopes.get(), name))


@runtime_checkable
class TelemetryReporter(Protocol):
    """Anything that can receive scope timings and metric values."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


class _NullTelemetry:
    """Stateless stand-in used whenever telemetry is off."""

    __slots__ = ()

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _ReportingTelemetry:
    """Fans scope timings and metrics out to every reporter.

    A failing reporter is logged and skipped; it never breaks the request.
    """

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter) -> None:
        self.reporters = reporters

    def _emit(self, method: str, *args: Any, **metadata: Any) -> None:
        for reporter in self.reporters:
            try:
                getattr(reporter, method)(*args, **metadata)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )

    @contextmanager
    def __call__(self, name: str, **metadata: Any) -> Iterator[Self]:
        """Time the enclosed block under ``<parent scopes>.<name>``."""
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")
        parents = _active_scopes.get()
        path = _qualified(name)
        token = _active_scopes.set((*parents, name))
        started = time.perf_counter()
        try:
            yield self
        finally:
            elapsed = time.perf_counter() - started
            _active_scopes.reset(token)
            self._emit(
                "record_timing",
                path,
                elapsed,
                depth=len(parents),
                parent_scope=".".join(parents) or None,
                **metadata,
            )

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        """Record `value` under the current scope path."""
        self._emit("record_metric", _qualified(name), value, **metadata)

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Record a counter increment."""
        self.metric(name, increment, metric_type="counter", **metadata)


_NULL_TELEMETRY = _NullTelemetry()

TelemetryContextProtocol: TypeAlias = _ReportingTelemetry | _NullTelemetry


def TelemetryContext(*reporters: TelemetryReporter) -> TelemetryContextProtocol:  # noqa: N802
    """Return a reporting context, or the shared no-op when telemetry is off."""
    if reporters and telemetry_enabled():
        return _ReportingTelemetry(*reporters)
    return _NULL_TELEMETRY


class InMemoryReporter:
    """Keeps the most recent timings and metrics per scope.

    Meant for development and tests; `get_report()` prints a summary.
    """

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = defaultdict(
            self._new_bucket
        )
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = defaultdict(
            self._new_bucket
        )

    def _new_bucket(self) -> deque[Any]:
        return deque(maxlen=self.max_entries)

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self.timings[scope].append((duration, metadata))

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self.metrics[scope].append((value, metadata))

    def get_report(self) -> str:
        """One line per scope: call counts with total seconds, metric totals."""
        lines = ["=== Telemetry Report ==="]
        for scope in sorted(self.timings):
            entries = self.timings[scope]
            total = sum(duration for duration, _ in entries)
            lines.append(f"{scope:<40} | calls={len(entries):<4} | {total:.4f}s")
        for scope in sorted(self.metrics):
            entries = self.metrics[scope]
            total = sum(v for v, _ in entries if isinstance(v, int | float))
            lines.append(f"{scope:<40} | values={len(entries):<4} | sum={total:g}")
        return "\n".join(lines)
