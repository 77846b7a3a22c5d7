"""Basic exceptions for vision tag recovery"""  # noqa: D415


class VisionTagsError(Exception):
    """Base exception for vision tag recovery errors"""  # noqa: D415


class ConfigurationError(VisionTagsError, ValueError):
    """Raised when recovery settings fail validation"""  # noqa: D415


class PayloadShapeError(VisionTagsError, ValueError):
    """Raised when a parsed value is not a usable tagging payload.

    Recovery strategies raise this to signal a failed rung of the ladder; the
    parser always catches it, so it never reaches callers of the pipeline.
    """
