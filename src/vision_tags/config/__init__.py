"""Configuration management for the vision_tags pipeline.

Resolve once, freeze, then flow:
- ResolvedConfig: Post-resolution configuration with audit metadata
- RecoveryConfig: Immutable configuration consumed by the pipeline
- SourceMap: Audit tracking of configuration value origins
"""

from .api import load_recovery_config, resolve_config
from .audit import SourceTracker
from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver
from .schema import RecoverySettings
from .types import ConfigOrigin, RecoveryConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "ConfigResolver",
    "FileConfigLoader",
    "RecoveryConfig",
    "RecoverySettings",
    "ResolvedConfig",
    "SourceMap",
    "SourceTracker",
    "load_recovery_config",
    "resolve_config",
]
