"""Assemble validated tagging results from raw model responses.

Provides the two-tier chain that turns any upstream response into a stable
`SanitizedResult`: the recovery ladder (Tier 1) with a plain-text fallback
(Tier 2). Only a response without any usable text produces ``ok=False``; text
that is not JSON degrades to a best-effort tag list instead of an error.

Focus: how to configure and call `ResultAssembler`, what it returns, and when
diagnostics are produced.
"""

from __future__ import annotations

import logging
from typing import Any, Never

from vision_tags.config.api import load_recovery_config
from vision_tags.config.types import RecoveryConfig
from vision_tags.core.types import ParsedPayload, Result, SanitizedResult, Success
from vision_tags.recovery.parser import JsonRecoveryParser
from vision_tags.sanitize.sanitizer import ObjectSanitizer
from vision_tags.telemetry import TelemetryContext, TelemetryContextProtocol

from .base import BaseAsyncHandler
from .envelope import resolve_input
from .fallback import PlainTextFallback

log = logging.getLogger(__name__)

EMPTY_INPUT_ERROR = "Model returned no usable text."
FALLBACK_METHOD = "plain_text_fallback"
STRUCTURED_METHOD = "structured"


class ResultAssembler(BaseAsyncHandler[Any, SanitizedResult, Never]):
    """Build `SanitizedResult`s from envelopes or text blobs.

    Instances hold only immutable collaborators, so one assembler can serve
    concurrent requests.

    Attributes:
        config: Frozen settings driving limits, defaults and diagnostics.
        parser: Recovery ladder for text blobs.
        sanitizer: Name policy and dedup for recovered entries.
        fallback: Plain-text projection used when recovery fails.
    """

    def __init__(
        self,
        config: RecoveryConfig | None = None,
        *,
        parser: JsonRecoveryParser | None = None,
        sanitizer: ObjectSanitizer | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the assembler.

        Args:
            config: Frozen configuration. Defaults to `RecoveryConfig()`.
            parser: Optional custom parser (e.g. with extra strategies).
            sanitizer: Optional custom sanitizer.
            telemetry: Optional telemetry context.
        """
        self.config = config if config is not None else RecoveryConfig()
        self._tele = telemetry if telemetry is not None else TelemetryContext()
        self.parser = (
            parser
            if parser is not None
            else JsonRecoveryParser(
                max_unwrap_depth=self.config.max_unwrap_depth, telemetry=self._tele
            )
        )
        self.sanitizer = (
            sanitizer
            if sanitizer is not None
            else ObjectSanitizer(
                default_confidence=self.config.default_confidence,
                extra_blocked_names=self.config.extra_blocked_names,
            )
        )
        self.fallback = PlainTextFallback(
            sanitizer=self.sanitizer,
            max_objects=self.config.fallback_max_objects,
            max_fragment_length=self.config.fallback_max_fragment_length,
            confidence=self.config.fallback_confidence,
        )

    async def handle(self, command: Any) -> Result[SanitizedResult, Never]:
        """Pipeline-handler form of `assemble`; always returns `Success`."""
        return Success(self.assemble(command))

    def assemble(self, raw: Any) -> SanitizedResult:
        """Turn one upstream response into a `SanitizedResult`.

        Args:
            raw: Plain text, an envelope mapping, or a mapping that already
                carries an `objects` array.

        Returns:
            `SanitizedResult`; this method does not raise for malformed input.
        """
        with self._tele("assemble"):
            result = self._assemble(raw)
        self._tele.count(f"method.{result.method}")
        return result

    def _assemble(self, raw: Any) -> SanitizedResult:
        if isinstance(raw, bytes | bytearray):
            # Results go on the wire as JSON, so bytes are kept as decoded text
            raw = bytes(raw).decode("utf-8", errors="replace")
        diagnostics: dict[str, Any] | None = (
            {"flags": []} if self.config.enable_diagnostics else None
        )
        resolved = resolve_input(raw)
        if diagnostics is not None:
            diagnostics["input_source"] = resolved.source

        if resolved.payload is not None:
            return self._from_payload(
                resolved.payload, raw, STRUCTURED_METHOD, diagnostics
            )

        if resolved.is_empty:
            log.warning(
                "No usable text in model response of type %s", type(raw).__name__
            )
            return SanitizedResult(
                ok=False,
                error=EMPTY_INPUT_ERROR,
                raw=raw,
                diagnostics=diagnostics,
            )

        blob = resolved.blob
        if len(blob) > self.config.max_text_size:
            log.warning(
                "Truncating model output from %d to %d characters",
                len(blob),
                self.config.max_text_size,
            )
            blob = blob[: self.config.max_text_size]
            if diagnostics is not None:
                diagnostics["flags"].append("truncated_input")

        # Tier 1: recovery ladder
        payload, recovery = self.parser.recover_with_diagnostics(blob)
        if diagnostics is not None:
            diagnostics["recovery"] = recovery.to_dict()
        if payload is not None:
            method = recovery.successful_strategy or "recovered"
            return self._from_payload(payload, raw, method, diagnostics)

        # Tier 2: plain-text fallback (always succeeds)
        objects = self.fallback.extract(blob)
        log.debug("Structured recovery failed; fallback kept %d objects", len(objects))
        return SanitizedResult(
            ok=True,
            caption="",
            objects=objects,
            raw=raw,
            method=FALLBACK_METHOD,
            diagnostics=diagnostics,
        )

    def _from_payload(
        self,
        payload: ParsedPayload,
        raw: Any,
        method: str,
        diagnostics: dict[str, Any] | None,
    ) -> SanitizedResult:
        objects = self.sanitizer.sanitize(payload.objects)
        if diagnostics is not None:
            diagnostics["raw_object_count"] = len(payload.objects)
            diagnostics["dropped_object_count"] = len(payload.objects) - len(objects)
        return SanitizedResult(
            ok=True,
            caption=payload.caption,
            objects=objects,
            raw=raw,
            method=method,
            diagnostics=diagnostics,
        )

    def to_response(self, result: SanitizedResult) -> dict[str, Any]:
        """Render `result` in wire shape according to the output settings."""
        return result.to_dict(
            include_raw=self.config.include_raw,
            include_diagnostics=self.config.enable_diagnostics,
        )


def assemble(raw: Any, *, config: RecoveryConfig | None = None) -> SanitizedResult:
    """Convenience wrapper: assemble one response with resolved configuration.

    When `config` is None the configuration is resolved from the environment
    and files, which may raise `ConfigurationError` for invalid settings.
    """
    if config is None:
        config = load_recovery_config()
    return ResultAssembler(config).assemble(raw)
