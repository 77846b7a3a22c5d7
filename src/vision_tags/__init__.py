"""Recover clean object tags from unreliable vision-model output."""

import importlib.metadata
import logging

from vision_tags.config import RecoveryConfig, load_recovery_config, resolve_config
from vision_tags.core.types import (
    Failure,
    ObjectEntry,
    ParsedPayload,
    Result,
    SanitizedResult,
    Success,
)
from vision_tags.exceptions import (
    ConfigurationError,
    PayloadShapeError,
    VisionTagsError,
)
from vision_tags.pipeline import ResultAssembler, assemble
from vision_tags.recovery import (
    JsonRecoveryParser,
    StrategySpec,
    default_strategies,
    normalize_escapes,
)
from vision_tags.sanitize import ObjectSanitizer
from vision_tags.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("vision-tags")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Entry points
    "assemble",
    "ResultAssembler",
    # Components
    "JsonRecoveryParser",
    "ObjectSanitizer",
    "StrategySpec",
    "default_strategies",
    "normalize_escapes",
    # Types
    "Failure",
    "ObjectEntry",
    "ParsedPayload",
    "Result",
    "SanitizedResult",
    "Success",
    # Configuration
    "RecoveryConfig",
    "load_recovery_config",
    "resolve_config",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "ConfigurationError",
    "PayloadShapeError",
    "VisionTagsError",
]
