"""Plain-text fallback: salvage a tag list when structured recovery fails.

Like a minimal projection of the response, this path never fails. It splits
the text into fragments, keeps the ones that look like short object names and
labels all of them with the fallback confidence.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re

from vision_tags.core.types import Confidence, ObjectEntry
from vision_tags.sanitize.policy import JUNK_TOKENS
from vision_tags.sanitize.sanitizer import ObjectSanitizer

log = logging.getLogger(__name__)

_DELIMITERS_RE = re.compile(r"[,;:\r\n•·|]+")
_LEADING_MARKER_RE = re.compile(r"^(?:[-*–—>]+|\d{1,3}[.)])\s*")
_STRIP_CHARS = " \t\"'`{}[]()."

# Schema vocabulary that leaks into fragments of broken JSON.
FIELD_TOKENS: frozenset[str] = frozenset(
    {"objects", "caption", "name", "confidence", "low", "medium", "high"}
)


@dataclass(frozen=True)
class PlainTextFallback:
    """Best-effort extraction of object names from unstructured text.

    Attributes:
        sanitizer: Applies the same name policy and dedup as structured results.
        max_objects: Cap on the number of returned entries.
        max_fragment_length: Longer fragments are treated as prose, not names.
        confidence: Label assigned to every surviving fragment.
    """

    sanitizer: ObjectSanitizer
    max_objects: int = 30
    max_fragment_length: int = 40
    confidence: Confidence = "low"

    def fragments(self, text: str) -> list[str]:
        """Candidate names in text order, before policy checks."""
        out: list[str] = []
        for piece in _DELIMITERS_RE.split(text):
            fragment = _LEADING_MARKER_RE.sub("", piece.strip()).strip(_STRIP_CHARS)
            if not fragment or len(fragment) > self.max_fragment_length:
                continue
            key = fragment.lower()
            if "json" in key or key in JUNK_TOKENS or key in FIELD_TOKENS:
                continue
            out.append(fragment)
        return out

    def extract(self, text: str) -> tuple[ObjectEntry, ...]:
        """Return at most `max_objects` clean entries salvaged from `text`."""
        candidates = [
            {"name": fragment, "confidence": self.confidence}
            for fragment in self.fragments(text)
        ]
        cleaned = self.sanitizer.sanitize(candidates)
        if len(cleaned) > self.max_objects:
            log.debug(
                "Capping fallback objects from %d to %d", len(cleaned), self.max_objects
            )
        return cleaned[: self.max_objects]
