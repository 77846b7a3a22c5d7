"""Recovery parser that rebuilds tagging payloads from unreliable text.

The parser runs an ordered ladder of `StrategySpec`s over one text blob. The
first extractor that returns a structurally valid `ParsedPayload` wins; later
strategies are never attempted and results are never merged. When every rung
fails the parser returns None, which callers treat as an ordinary outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any

from vision_tags.core.types import ParsedPayload
from vision_tags.telemetry import TelemetryContext, TelemetryContextProtocol

from .strategies import RecoveryContext, StrategySpec, default_strategies

log = logging.getLogger(__name__)

DEFAULT_MAX_UNWRAP_DEPTH = 5

# Errors a strategy may raise while failing; anything else is a bug and propagates.
_STRATEGY_ERRORS = (ValueError, TypeError, SyntaxError, RecursionError, MemoryError)


@dataclass
class RecoveryDiagnostics:
    """What the ladder tried for one call to `recover_with_diagnostics`."""

    attempted_strategies: list[str] = field(default_factory=list)
    successful_strategy: str | None = None
    strategy_errors: dict[str, str] = field(default_factory=dict)
    max_depth_reached: int = 0
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-serializable view."""
        return {
            "attempted_strategies": list(self.attempted_strategies),
            "successful_strategy": self.successful_strategy,
            "strategy_errors": dict(self.strategy_errors),
            "max_depth_reached": self.max_depth_reached,
            "duration_ms": self.duration_ms,
        }


class JsonRecoveryParser:
    """Recover a `{caption, objects}` payload from a text blob.

    Attributes:
        strategies: Ladder rungs in evaluation order.
        max_unwrap_depth: Bound on nested quoted-string unwrapping.
    """

    def __init__(
        self,
        strategies: tuple[StrategySpec, ...] | None = None,
        *,
        max_unwrap_depth: int = DEFAULT_MAX_UNWRAP_DEPTH,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            strategies: Optional custom ladder. Defaults to the built-ins.
            max_unwrap_depth: Maximum quoted-unwrap nesting; must be >= 0.
            telemetry: Optional telemetry context for timings.
        """
        if max_unwrap_depth < 0:
            raise ValueError("max_unwrap_depth must be >= 0")
        specs = strategies if strategies is not None else default_strategies()
        # Deterministic order: higher priority first, name as tiebreaker
        self.strategies: tuple[StrategySpec, ...] = tuple(
            sorted(specs, key=lambda s: (-s.priority, s.name))
        )
        self.max_unwrap_depth = max_unwrap_depth
        self._tele = telemetry if telemetry is not None else TelemetryContext()

    def recover(self, text: str) -> ParsedPayload | None:
        """Return the first payload the ladder recovers, or None."""
        payload, _ = self.recover_with_diagnostics(text)
        return payload

    def recover_with_diagnostics(
        self, text: str
    ) -> tuple[ParsedPayload | None, RecoveryDiagnostics]:
        """Like `recover`, also reporting which strategies ran and why they failed.

        Errors from nested unwraps are recorded under a depth-qualified key
        (e.g. ``quoted_string_unwrap>direct_parse``) so the outer record stays
        readable.
        """
        diagnostics = RecoveryDiagnostics()
        start = time.perf_counter()
        with self._tele("recovery.recover"):
            payload = self._run(text, 0, diagnostics, prefix="")
        diagnostics.duration_ms = (time.perf_counter() - start) * 1000
        if payload is None:
            log.debug(
                "No recovery strategy matched; attempted=%s",
                diagnostics.attempted_strategies,
            )
        return payload, diagnostics

    def _run(
        self,
        text: str,
        depth: int,
        diagnostics: RecoveryDiagnostics,
        *,
        prefix: str,
    ) -> ParsedPayload | None:
        if not isinstance(text, str):
            return None
        candidate = text.strip()
        if not candidate:
            return None
        diagnostics.max_depth_reached = max(diagnostics.max_depth_reached, depth)

        for spec in self.strategies:
            if not spec.matcher(candidate):
                continue
            key = f"{prefix}{spec.name}"
            if depth == 0:
                diagnostics.attempted_strategies.append(spec.name)

            def _recurse(
                inner: str, inner_depth: int, _key: str = key
            ) -> ParsedPayload | None:
                return self._run(inner, inner_depth, diagnostics, prefix=f"{_key}>")

            ctx = RecoveryContext(
                depth=depth, max_depth=self.max_unwrap_depth, recover=_recurse
            )
            try:
                payload = spec.extractor(candidate, ctx)
            except _STRATEGY_ERRORS as e:
                diagnostics.strategy_errors[key] = f"{type(e).__name__}: {e}"
                log.debug("Strategy %s failed at depth %d: %s", key, depth, e)
                continue

            if depth == 0:
                diagnostics.successful_strategy = spec.name
            log.debug(
                "Strategy %s recovered %d raw objects", key, len(payload.objects)
            )
            return payload

        return None
