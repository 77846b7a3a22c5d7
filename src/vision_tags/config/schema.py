"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from the environment, TOML files and programmatic overrides into the
correct types with proper defaults.
"""

from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from vision_tags.core.types import CONFIDENCE_LEVELS, Confidence


class RecoverySettings(BaseSettings):
    """Pydantic settings schema for the recovery pipeline.

    Integrates with environment variables using the VISION_TAGS_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="VISION_TAGS_",
        env_file=None,
        case_sensitive=False,
        extra="ignore",  # Ignore unknown keys for forward compatibility
    )

    # --- Fallback extraction ---

    fallback_max_objects: int = Field(
        default=30,
        description="Maximum objects returned by the plain-text fallback",
        ge=1,
        le=200,
    )

    fallback_max_fragment_length: int = Field(
        default=40,
        description="Fragments longer than this are not treated as object names",
        ge=1,
    )

    fallback_confidence: Confidence = Field(
        default="low",
        description="Confidence assigned to every plain-text fallback object",
    )

    # --- Recovery parsing ---

    max_unwrap_depth: int = Field(
        default=5,
        description="Maximum nesting of quoted-string unwrapping",
        ge=1,
        le=32,
    )

    max_text_size: int = Field(
        default=1_000_000,
        description="Longer text blobs are truncated before parsing",
        ge=1,
    )

    # --- Sanitization ---

    default_confidence: Confidence = Field(
        default="low",
        description="Confidence used when an entry's label is unreadable",
    )

    extra_blocked_names: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description="Additional object names rejected by policy",
    )

    # --- Output ---

    include_raw: bool = Field(
        default=False,
        description="Echo the raw input in successful results",
    )

    enable_diagnostics: bool = Field(
        default=False,
        description="Attach recovery diagnostics to results",
    )

    # --- Validation Rules ---

    @field_validator("default_confidence", "fallback_confidence", mode="before")
    @classmethod
    def parse_confidence(cls, v: Any) -> Any:
        """Accept confidence labels in any case and with stray whitespace."""
        if isinstance(v, str):
            label = v.strip().lower()
            if label in CONFIDENCE_LEVELS:
                return label
        raise ValueError(
            f"Invalid confidence: {v!r}. Must be one of: low, medium, high"
        )

    @field_validator("extra_blocked_names", mode="before")
    @classmethod
    def parse_names(cls, v: Any) -> Any:
        """Accept a comma separated string as well as a list of names."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(",") if part.strip())
        if isinstance(v, list | tuple | set | frozenset):
            return tuple(str(part).strip() for part in v if str(part).strip())
        return v

    @classmethod
    def field_defaults(cls) -> dict[str, Any]:
        """Schema defaults, without reading the environment."""
        return {
            name: info.get_default(call_default_factory=True)
            for name, info in cls.model_fields.items()
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for SourceMap annotation."""
        return {name: getattr(self, name) for name in type(self).model_fields}
