"""Core data types that flow through the recovery pipeline.

This module defines the immutable data structures that represent a tagging
response as it moves from untrusted generator text to a validated result.
Each stage produces a new value; nothing is mutated after construction, so
instances can be shared freely between concurrent requests.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import dataclasses
from types import MappingProxyType
import typing

# --- Minimal guard helpers ---

T = typing.TypeVar("T")

Confidence = typing.Literal["low", "medium", "high"]
CONFIDENCE_LEVELS: frozenset[str] = frozenset(("low", "medium", "high"))


def _freeze_mapping(
    m: dict[str, T] | Mapping[str, T] | None,
) -> Mapping[str, T] | None:
    """Return an immutable mapping view or None."""
    if m is None or isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m))


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def is_array_like(value: object) -> bool:
    """True for ordered sequences that are not text."""
    return isinstance(value, Sequence) and not isinstance(
        value, str | bytes | bytearray
    )


# --- Result Monad for Robust Error Handling ---
# Failures travel as values so handlers never need broad try/except blocks.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful result in the pipeline."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failure in the pipeline, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Core Data Models ---


@dataclasses.dataclass(frozen=True, slots=True)
class ParsedPayload:
    """A structurally valid payload recovered from generator output.

    `objects` holds the raw, untrusted entries exactly as they were parsed;
    the sanitizer decides which of them survive.
    """

    caption: str
    objects: tuple[typing.Any, ...]

    def __post_init__(self) -> None:
        """Validate invariants for type safety."""
        _require(
            condition=isinstance(self.caption, str),
            message="must be str",
            field_name="caption",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.objects, tuple),
            message="must be a tuple",
            field_name="objects",
            exc=TypeError,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, typing.Any]) -> ParsedPayload:
        """Build a payload from a decoded mapping that carries an `objects` array.

        A caption that is missing or not a string becomes the empty string.
        """
        objects = data.get("objects")
        _require(
            condition=is_array_like(objects),
            message="must be an array",
            field_name="objects",
        )
        caption = data.get("caption")
        return cls(
            caption=caption.strip() if isinstance(caption, str) else "",
            objects=tuple(typing.cast("Sequence[typing.Any]", objects)),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ObjectEntry:
    """A clean, policy-compliant object name with its confidence label."""

    name: str
    confidence: Confidence = "low"

    def __post_init__(self) -> None:
        """Validate invariants for type safety."""
        _require(
            condition=isinstance(self.name, str) and bool(self.name.strip()),
            message="must be a non-empty string",
            field_name="name",
        )
        _require(
            condition=self.name == self.name.strip(),
            message="must be trimmed",
            field_name="name",
        )
        _require(
            condition=self.confidence in CONFIDENCE_LEVELS,
            message=f"must be one of {sorted(CONFIDENCE_LEVELS)}",
            field_name="confidence",
        )

    def to_dict(self) -> dict[str, str]:
        """Wire representation used in result envelopes."""
        return {"name": self.name, "confidence": self.confidence}


@dataclasses.dataclass(frozen=True, slots=True)
class SanitizedResult:
    """Terminal artifact of one recovery request.

    Attributes:
        ok: False only when no text could be resolved from the input at all.
        caption: Recovered caption, or "" when unknown.
        objects: Clean entries in first-occurrence order.
        error: Human-readable reason; present only when `ok` is False.
        raw: The original envelope or text, kept for diagnostics.
        method: How the result was produced (`structured`, a recovery
            strategy name, `plain_text_fallback`, or `none`).
        diagnostics: Optional extraction diagnostics.
    """

    ok: bool
    caption: str = ""
    objects: tuple[ObjectEntry, ...] = ()
    error: str | None = None
    raw: typing.Any = None
    method: str = "none"
    diagnostics: Mapping[str, typing.Any] | None = None

    def __post_init__(self) -> None:
        """Validate invariants and freeze the diagnostics mapping."""
        _require(
            condition=all(isinstance(o, ObjectEntry) for o in self.objects),
            message="must contain only ObjectEntry items",
            field_name="objects",
            exc=TypeError,
        )
        _require(
            condition=self.ok or bool(self.error),
            message="an error message is required when ok is False",
            field_name="error",
        )
        seen = [o.name.lower() for o in self.objects]
        _require(
            condition=len(seen) == len(set(seen)),
            message="names must be unique (case-insensitive)",
            field_name="objects",
        )
        object.__setattr__(self, "diagnostics", _freeze_mapping(self.diagnostics))

    @classmethod
    def failure(cls, error: str, *, raw: typing.Any = None) -> SanitizedResult:
        """Result for inputs that carried no usable text."""
        return cls(ok=False, error=error, raw=raw)

    def to_dict(
        self, *, include_raw: bool = False, include_diagnostics: bool = False
    ) -> dict[str, typing.Any]:
        """Render the wire shape handed to the HTTP layer.

        `raw` is always included for failed results; successful results carry
        it only when `include_raw` is set.
        """
        out: dict[str, typing.Any] = {
            "ok": self.ok,
            "caption": self.caption,
            "objects": [o.to_dict() for o in self.objects],
        }
        if not self.ok:
            out["error"] = self.error
        if include_raw or not self.ok:
            out["raw"] = self.raw
        if include_diagnostics:
            out["method"] = self.method
            if self.diagnostics is not None:
                out["diagnostics"] = dict(self.diagnostics)
        return out
