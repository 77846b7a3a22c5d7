"""Validation, normalization and deduplication of raw object entries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from vision_tags.core.types import (
    CONFIDENCE_LEVELS,
    Confidence,
    ObjectEntry,
    is_array_like,
)

from . import policy

log = logging.getLogger(__name__)


class ObjectSanitizer:
    """Turn untrusted `{name, confidence}` entries into clean `ObjectEntry`s.

    Every entry is judged on its own; a malformed entry is dropped and never
    aborts the list. The first accepted entry for a case-insensitive name wins.
    """

    def __init__(
        self,
        *,
        default_confidence: Confidence = "low",
        extra_blocked_names: Iterable[str] = (),
    ) -> None:
        """Initialize the sanitizer.

        Args:
            default_confidence: Label for entries whose confidence is unreadable.
            extra_blocked_names: Additional names to reject, matched like the
                built-in semantic blacklist (trimmed, case-insensitive).
        """
        if default_confidence not in CONFIDENCE_LEVELS:
            raise ValueError(
                f"default_confidence must be one of {sorted(CONFIDENCE_LEVELS)}"
            )
        self.default_confidence: Confidence = default_confidence
        self.extra_blocked_names: frozenset[str] = frozenset(
            policy.normalize_name_key(n)
            for n in extra_blocked_names
            if isinstance(n, str) and n.strip()
        )

    def sanitize(self, raw_entries: Any) -> tuple[ObjectEntry, ...]:
        """Return clean entries in input order, minus rejections and duplicates.

        Accepts any value; anything that is not an ordered sequence yields an
        empty tuple. Already-clean `ObjectEntry` items pass through unchanged.
        """
        if not is_array_like(raw_entries):
            return ()

        cleaned: list[ObjectEntry] = []
        seen: set[str] = set()
        for index, raw in enumerate(raw_entries):
            entry = self.clean_entry(raw)
            if entry is None:
                continue
            key = policy.normalize_name_key(entry.name)
            if key in seen:
                log.debug("Dropping duplicate object #%d: %r", index, entry.name)
                continue
            seen.add(key)
            cleaned.append(entry)
        return tuple(cleaned)

    def clean_entry(self, raw: Any) -> ObjectEntry | None:
        """Clean one entry, or return None when policy rejects it."""
        if isinstance(raw, ObjectEntry):
            raw = raw.to_dict()
        if not isinstance(raw, Mapping):
            log.debug("Dropping non-object entry of type %s", type(raw).__name__)
            return None

        name = raw.get("name")
        if not isinstance(name, str):
            return None
        name = name.strip()
        if not name:
            return None

        reason = self.rejection_reason(name)
        if reason is not None:
            log.debug("Dropping object %r: %s", name, reason)
            return None

        return ObjectEntry(
            name=name, confidence=self.normalize_confidence(raw.get("confidence"))
        )

    def rejection_reason(self, name: str) -> str | None:
        """Name the policy rule a (trimmed) name violates, or None."""
        key = policy.normalize_name_key(name)
        if policy.is_junk(key):
            return "junk token"
        if policy.is_instruction_echo(key):
            return "instruction echo"
        if policy.is_blacklisted(key) or key in self.extra_blocked_names:
            return "blacklisted term"
        if policy.is_too_abstract(key):
            return "too abstract"
        return None

    def normalize_confidence(self, value: Any) -> Confidence:
        """Lowercased confidence label, or the default when unreadable."""
        if isinstance(value, str):
            label = value.strip().lower()
            if label in CONFIDENCE_LEVELS:
                return label  # type: ignore[return-value]
        return self.default_confidence
