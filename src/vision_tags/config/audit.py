"""Configuration source tracking.

This module builds the SourceMap recording where each configuration value
originated during resolution.
"""

from typing import Any

from .types import ConfigOrigin, SourceMap


class SourceTracker:
    """Tracks the origin of configuration values during resolution."""

    def __init__(self) -> None:
        """Initialize an empty source tracker."""
        self._origins: dict[str, ConfigOrigin] = {}

    def set_origin(self, field: str, origin: ConfigOrigin) -> None:
        """Record the origin of a configuration field."""
        self._origins[field] = origin

    def set_multiple(self, fields: dict[str, Any], origin: ConfigOrigin) -> None:
        """Record the same origin for several fields at once."""
        for field in fields:
            self._origins[field] = origin

    def get_source_map(self) -> SourceMap:
        """Return a copy of the current source map."""
        return dict(self._origins)
