"""Public API for the configuration system."""

from pathlib import Path
from typing import Any

from .resolver import ConfigResolver
from .types import RecoveryConfig, ResolvedConfig

# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > Project file > Home file > Defaults

    Args:
        programmatic: Dictionary of programmatic overrides (highest precedence).
            Only known configuration fields are used.
        project_root: Directory to search for pyproject.toml. If None,
            searches the current directory and parents.

    Returns:
        ResolvedConfig with merged values and source tracking for audit.

    Raises:
        ConfigurationError: If validation fails or environment variables
            contain invalid values.
        ConfigFileError: If the project configuration file is malformed.

    Example:
        config = resolve_config({"fallback_max_objects": 15})
        print(config.audit())
    """
    return _resolver.resolve(programmatic, project_root=project_root)


def load_recovery_config(
    programmatic: dict[str, Any] | None = None,
    *,
    project_root: Path | None = None,
) -> RecoveryConfig:
    """Resolve and freeze configuration in one step."""
    return resolve_config(programmatic, project_root=project_root).to_frozen()
