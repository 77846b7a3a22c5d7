"""File-based configuration loading.

This module handles loading configuration from TOML files: the project-level
``[tool.vision_tags]`` table of the nearest pyproject.toml and the home-level
``~/.config/vision_tags.toml`` file.
"""

import os
from pathlib import Path
import tomllib
from typing import Any

from vision_tags.exceptions import VisionTagsError


class ConfigFileError(VisionTagsError):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause.

        Args:
            file_path: The file that failed to load
            message: Human-readable error message
            cause: The underlying exception that caused the failure
        """
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads configuration from TOML files."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Load the ``[tool.vision_tags]`` table from the nearest pyproject.toml.

        Args:
            project_root: Directory to start searching from. If None,
                searches the current directory and its parents.

        Returns:
            Configuration values from the file; empty if there is no file or
            no vision_tags table.

        Raises:
            ConfigFileError: If the file exists but is malformed.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path or not pyproject_path.exists():
            return {}

        data = self._read_toml(pyproject_path)
        section = data.get("tool", {}).get("vision_tags", {})
        if not isinstance(section, dict):
            raise ConfigFileError(
                pyproject_path, "[tool.vision_tags] must be a table"
            )
        return dict(section)

    def load_home_config(self) -> dict[str, Any]:
        """Load configuration from ~/.config/vision_tags.toml.

        Raises:
            ConfigFileError: If the file exists but is malformed.
        """
        home_config_path = self._get_home_config_path()
        if not home_config_path.exists():
            return {}
        return self._read_toml(home_config_path)

    def _read_toml(self, path: Path) -> dict[str, Any]:
        try:
            with Path(path).open(mode="rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(path, f"Failed to parse TOML: {e}", cause=e) from e

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Find pyproject.toml by searching up the directory tree.

        VISION_TAGS_PYPROJECT_PATH, when set, names the file directly.
        """
        override = os.getenv("VISION_TAGS_PYPROJECT_PATH")
        if override:
            return Path(override)
        current = Path(start_dir if start_dir is not None else Path.cwd()).resolve()

        while True:
            pyproject_path = current / "pyproject.toml"
            if pyproject_path.exists():
                return pyproject_path
            if current == current.parent:  # filesystem root
                return None
            current = current.parent

    def _get_home_config_path(self) -> Path:
        """Path to ~/.config/vision_tags.toml, or VISION_TAGS_CONFIG_HOME if set."""
        override = os.getenv("VISION_TAGS_CONFIG_HOME")
        if override:
            return Path(override)
        return Path.home() / ".config" / "vision_tags.toml"
