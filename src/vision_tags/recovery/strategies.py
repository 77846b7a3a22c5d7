"""Built-in recovery strategies for generator output.

Each strategy is a `StrategySpec`: a cheap `matcher` deciding whether the
strategy applies to a text, and an `extractor` that either returns a
structurally valid `ParsedPayload` or raises. The parser evaluates specs in
priority order and stops at the first extractor that returns.

Strategies:
    direct_parse: the trimmed text is already a JSON payload.
    quoted_string_unwrap: the payload was serialized once more as a string
        literal; decode it and run the whole ladder on the inner text.
    escape_repair: quotes arrive backslash-escaped without outer quotes.
    brace_extraction: the payload is embedded in surrounding prose.
"""

from __future__ import annotations

import ast
from collections.abc import Callable
from dataclasses import dataclass
import json
import re
from typing import Any

from vision_tags.core.types import ParsedPayload, is_array_like
from vision_tags.exceptions import PayloadShapeError

from .normalizer import normalize_escapes

_QUOTE_CHARS = ('"', "'")
_ESCAPED_QUOTE_RE = re.compile(r"\\+[\"']")
_ESCAPED_FIELD_MARKERS = (
    '\\"objects',
    '\\"caption',
    '\\"name',
    '\\"confidence',
)


@dataclass(frozen=True)
class RecoveryContext:
    """Per-call state handed to extractors.

    Attributes:
        depth: Current quoted-unwrap nesting level (0 for the outer text).
        max_depth: Deepest nesting level an unwrap may recurse into.
        recover: Callback running the full ladder on an inner text at a
            given depth; returns None when nothing recovers.
    """

    depth: int
    max_depth: int
    recover: Callable[[str, int], ParsedPayload | None]


@dataclass(frozen=True)
class StrategySpec:
    """Specification for one rung of the recovery ladder.

    Attributes:
        name: Stable identifier, also reported as the result method.
        matcher: Returns True when the strategy should be attempted.
        extractor: Returns a `ParsedPayload` or raises on failure.
        priority: Higher runs first; ties are broken by name.
    """

    name: str
    matcher: Callable[[str], bool]
    extractor: Callable[[str, RecoveryContext], ParsedPayload]
    priority: int = 0

    def __post_init__(self) -> None:
        """Fail at construction when a custom strategy is malformed."""
        if not self.name or not isinstance(self.name, str):
            raise ValueError("StrategySpec name must be a non-empty string")
        if not callable(self.matcher) or not callable(self.extractor):
            raise TypeError("StrategySpec matcher and extractor must be callable")


def loads_payload(text: str) -> ParsedPayload:
    """Parse `text` as JSON and require the tagging payload shape.

    Raises:
        json.JSONDecodeError: If the text is not JSON.
        PayloadShapeError: If the JSON is not an object with an `objects` array.
    """
    value: Any = json.loads(text, strict=False)
    if not isinstance(value, dict):
        raise PayloadShapeError(f"expected a JSON object, got {type(value).__name__}")
    if not is_array_like(value.get("objects")):
        raise PayloadShapeError("JSON object has no 'objects' array")
    return ParsedPayload.from_mapping(value)


# --- direct_parse ---


def _always(text: str) -> bool:
    return bool(text)


def _extract_direct(text: str, ctx: RecoveryContext) -> ParsedPayload:  # noqa: ARG001
    return loads_payload(text)


# --- quoted_string_unwrap ---


def _is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] in _QUOTE_CHARS and text[-1] == text[0]


def _decode_string_literal(text: str) -> str:
    """Decode a quoted string literal (JSON rules for `"`, Python rules for `'`)."""
    if text[0] == '"':
        value = json.loads(text, strict=False)
    else:
        value = ast.literal_eval(text)
    if not isinstance(value, str):
        raise PayloadShapeError(
            f"quoted literal decoded to {type(value).__name__}, not a string"
        )
    return value


def _extract_unwrapped(text: str, ctx: RecoveryContext) -> ParsedPayload:
    inner = _decode_string_literal(text)
    next_depth = ctx.depth + 1
    if next_depth > ctx.max_depth:
        raise PayloadShapeError(
            f"quoted unwrap exceeded max depth of {ctx.max_depth}"
        )
    payload = ctx.recover(inner, next_depth)
    if payload is None:
        raise PayloadShapeError("unwrapped string did not contain a payload")
    return payload


# --- escape_repair ---


def _has_escape_markers(text: str) -> bool:
    return bool(_ESCAPED_QUOTE_RE.search(text)) or any(
        marker in text for marker in _ESCAPED_FIELD_MARKERS
    )


def _extract_repaired(text: str, ctx: RecoveryContext) -> ParsedPayload:  # noqa: ARG001
    return loads_payload(normalize_escapes(text).strip())


# --- brace_extraction ---


def brace_span(text: str) -> str | None:
    """Return the substring from the first `{` through the last `}`, if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]


def _has_braces(text: str) -> bool:
    return brace_span(text) is not None


def _extract_braced(text: str, ctx: RecoveryContext) -> ParsedPayload:  # noqa: ARG001
    fragment = brace_span(text)
    if fragment is None:
        raise PayloadShapeError("no brace-delimited fragment")
    try:
        return loads_payload(fragment)
    except ValueError:
        return loads_payload(normalize_escapes(fragment))


def default_strategies() -> tuple[StrategySpec, ...]:
    """Return the built-in recovery ladder, highest priority first."""
    return (
        StrategySpec("direct_parse", _always, _extract_direct, priority=400),
        StrategySpec(
            "quoted_string_unwrap", _is_quoted, _extract_unwrapped, priority=300
        ),
        StrategySpec(
            "escape_repair", _has_escape_markers, _extract_repaired, priority=200
        ),
        StrategySpec("brace_extraction", _has_braces, _extract_braced, priority=100),
    )
