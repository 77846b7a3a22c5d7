"""Core configuration data types for the vision_tags pipeline.

This module defines the fundamental data structures used throughout the
configuration system, following the resolve-once, freeze-then-flow pattern.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from vision_tags.core.types import Confidence

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

# --- Core Configuration Data ---


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing.

    This represents the validated, merged result of combining programmatic
    overrides, environment variables, files, and defaults. It includes audit
    metadata recording where each value came from.
    """

    fallback_max_objects: int
    fallback_max_fragment_length: int
    fallback_confidence: Confidence
    max_unwrap_depth: int
    max_text_size: int
    default_confidence: Confidence
    extra_blocked_names: tuple[str, ...]
    include_raw: bool
    enable_diagnostics: bool

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def to_frozen(self) -> "RecoveryConfig":
        """Convert to the immutable configuration used by the pipeline."""
        values = self._asdict()
        values.pop("origin")
        return RecoveryConfig(**values)

    def audit(self) -> str:
        """Human-readable report showing the origin of each field."""
        lines = []
        for field in self._fields:
            if field == "origin" or field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if origin == "env":
                lines.append(f"{field}: env:VISION_TAGS_{field.upper()}={value}")
            else:
                lines.append(f"{field}: {origin}:{value}")
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class RecoveryConfig:
    """Immutable configuration consumed by the recovery pipeline."""

    fallback_max_objects: int = 30
    fallback_max_fragment_length: int = 40
    fallback_confidence: Confidence = "low"
    max_unwrap_depth: int = 5
    max_text_size: int = 1_000_000
    default_confidence: Confidence = "low"
    extra_blocked_names: tuple[str, ...] = ()
    include_raw: bool = False
    enable_diagnostics: bool = False
