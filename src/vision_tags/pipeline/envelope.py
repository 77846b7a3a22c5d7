"""Resolve a text blob or a structured payload from a model response.

Upstream collaborators hand over either plain text or one of several loosely
specified response envelopes. Envelopes are treated by capability ("has a
string at field X") and searched in a fixed priority order; no envelope type
hierarchy is assumed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from vision_tags.core.types import ParsedPayload, is_array_like

# Searched in this order; the first usable value wins.
CANDIDATE_TEXT_FIELDS: tuple[str, ...] = (
    "response",
    "result",
    "output",
    "output_text",
    "text",
    "content",
)


@dataclass(frozen=True)
class ResolvedInput:
    """What could be resolved from one upstream response.

    Exactly one of `payload` (already structured) or `blob` (text to parse) is
    meaningful; both empty means the upstream produced nothing usable.
    """

    payload: ParsedPayload | None = None
    blob: str = ""
    source: str = "none"

    @property
    def is_empty(self) -> bool:
        return self.payload is None and not self.blob


def has_structured_objects(value: Any) -> bool:
    """True for mappings that already carry an `objects` array."""
    return isinstance(value, Mapping) and is_array_like(value.get("objects"))


def _as_text(value: Any) -> str | None:
    """Return `value` when it is a non-blank string, else None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _chat_content(envelope: Mapping[str, Any]) -> str | None:
    """Text of ``choices[0].message.content`` in chat-completion envelopes.

    Content given as a list of typed parts is joined from its text parts.
    """
    choices = envelope.get("choices")
    if not is_array_like(choices) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else None
    if not isinstance(message, Mapping):
        return None
    content = message.get("content")
    if is_array_like(content):
        parts = [
            part.get("text")
            for part in content
            if isinstance(part, Mapping) and isinstance(part.get("text"), str)
        ]
        content = "\n".join(parts)
    return _as_text(content)


def resolve_input(raw: Any) -> ResolvedInput:
    """Find the most likely payload or text blob in an upstream response.

    Args:
        raw: Plain text, bytes, an envelope mapping, or a mapping that already
            holds an `objects` array.

    Returns:
        `ResolvedInput` naming the field the value came from in `source`.
    """
    if isinstance(raw, ParsedPayload):
        return ResolvedInput(payload=raw, source="payload")
    if isinstance(raw, bytes | bytearray):
        raw = bytes(raw).decode("utf-8", errors="replace")
    if isinstance(raw, str):
        text = _as_text(raw)
        return ResolvedInput(blob=text, source="text") if text else ResolvedInput()
    if not isinstance(raw, Mapping):
        return ResolvedInput()

    if has_structured_objects(raw):
        return ResolvedInput(payload=ParsedPayload.from_mapping(raw), source="envelope")

    for field in CANDIDATE_TEXT_FIELDS:
        value = raw.get(field)
        if has_structured_objects(value):
            return ResolvedInput(payload=ParsedPayload.from_mapping(value), source=field)
        text = _as_text(value)
        if text is not None:
            return ResolvedInput(blob=text, source=field)

    text = _chat_content(raw)
    if text is not None:
        return ResolvedInput(blob=text, source="choices[0].message.content")
    return ResolvedInput()
