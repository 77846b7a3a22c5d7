"""Environment variable configuration loading.

This module reads VISION_TAGS_* environment variables and coerces them
through the settings schema.
"""

import os
from typing import Any

from .schema import RecoverySettings

ENV_PREFIX = "VISION_TAGS_"


def env_var_names() -> dict[str, str]:
    """Map each environment variable name to its settings field."""
    return {
        f"{ENV_PREFIX}{field.upper()}": field for field in RecoverySettings.model_fields
    }


class EnvironmentConfigLoader:
    """Loads configuration from VISION_TAGS_* environment variables."""

    def load_env_config(self) -> dict[str, Any]:
        """Load configuration values that are set in the environment.

        Returns:
            Only the fields actually present in the environment, coerced to
            their schema types.

        Raises:
            ValueError: If environment variables contain invalid values.
        """
        env_values = {
            field: os.environ[env_var]
            for env_var, field in env_var_names().items()
            if env_var in os.environ
        }
        if not env_values:
            return {}

        try:
            settings = RecoverySettings(**env_values)
        except Exception as e:
            env_var_list = [
                f"{ENV_PREFIX}{field.upper()}={value}"
                for field, value in env_values.items()
            ]
            raise ValueError(
                f"Invalid environment variable values: {', '.join(env_var_list)}. "
                f"Error: {e}"
            ) from e

        return {field: getattr(settings, field) for field in env_values}

    def get_env_summary(self) -> dict[str, str]:
        """Current VISION_TAGS_* variables and their raw values."""
        return {
            env_var: os.environ[env_var]
            for env_var in env_var_names()
            if env_var in os.environ
        }
