"""Configuration resolution with precedence handling.

This module merges configuration from all sources according to the documented
precedence order:
Programmatic > Environment > Project file > Home file > Defaults
"""

import logging
from pathlib import Path
from typing import Any

from vision_tags.exceptions import ConfigurationError

from .audit import SourceTracker
from .env_loader import EnvironmentConfigLoader
from .file_loader import ConfigFileError, FileConfigLoader
from .schema import RecoverySettings
from .types import ResolvedConfig

log = logging.getLogger(__name__)


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        """Initialize the configuration resolver."""
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence)
            project_root: Directory to search for pyproject.toml

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ConfigurationError: If validation fails or the environment holds
                invalid values.
            ConfigFileError: If the project configuration file is malformed.
        """
        source_tracker = SourceTracker()
        merged_config: dict[str, Any] = {}

        # Step 1: Start with schema defaults
        defaults = RecoverySettings.field_defaults()
        merged_config.update(defaults)
        source_tracker.set_multiple(defaults, "default")

        # Step 2: Apply home file configuration (lower precedence)
        try:
            self._apply(
                merged_config,
                self.file_loader.load_home_config(),
                source_tracker,
                "file",
            )
        except ConfigFileError as e:
            # Home config errors are non-fatal - just skip home config
            log.warning("Ignoring unreadable home config: %s", e)

        # Step 3: Apply project file configuration
        self._apply(
            merged_config,
            self.file_loader.load_project_config(project_root=project_root),
            source_tracker,
            "file",
        )

        # Step 4: Apply environment variables
        try:
            env_config = self.env_loader.load_env_config()
        except ValueError as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e
        self._apply(merged_config, env_config, source_tracker, "env")

        # Step 5: Apply programmatic overrides (highest precedence)
        if programmatic:
            self._apply(merged_config, programmatic, source_tracker, "programmatic")

        # Step 6: Validate the final configuration using Pydantic
        try:
            final_config = RecoverySettings(**merged_config).to_dict()
        except Exception as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(**final_config, origin=source_tracker.get_source_map())

    @staticmethod
    def _apply(
        merged: dict[str, Any],
        values: dict[str, Any],
        tracker: SourceTracker,
        origin: Any,
    ) -> None:
        for field, value in values.items():
            if field in merged:  # Only override known fields
                merged[field] = value
                tracker.set_origin(field, origin)
