"""
Global test configuration with support for different test types.
"""

from collections.abc import Callable
import json
import logging
import os
from pathlib import Path

import pytest

from vision_tags.config.types import RecoveryConfig
from vision_tags.pipeline.assembler import ResultAssembler


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_vision_tags_env(request, monkeypatch):
    """Ensure a clean VISION_TAGS_* environment for each test.

    Escape hatch: mark a test with @pytest.mark.allow_env_pollution to keep
    the current environment unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("VISION_TAGS_"):
            monkeypatch.delenv(key, raising=False)
    # Avoid DEBUG toggles switching telemetry on
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture(autouse=True)
def neutral_config_files(request, monkeypatch, tmp_path, isolate_vision_tags_env):  # noqa: ARG001
    """Point home and project config paths at isolated, empty temp locations.

    Prevents reading a developer's real ~/.config/vision_tags.toml or any
    pyproject.toml above the test directory.

    Escape hatch: mark test with @pytest.mark.allow_real_config_files.
    """
    if request.node.get_closest_marker("allow_real_config_files"):
        return

    isolated = tmp_path / "config_isolated"
    isolated.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("VISION_TAGS_CONFIG_HOME", str(isolated / "vision_tags.toml"))
    monkeypatch.setenv("VISION_TAGS_PYPROJECT_PATH", str(isolated / "pyproject.toml"))


@pytest.fixture
def config_files(tmp_path, monkeypatch):
    """Write project and/or home TOML files and point the loaders at them.

    Returns a helper: ``config_files(pyproject="...", home="...")``.
    """

    def _write(*, pyproject: str = "", home: str = "") -> tuple[Path, Path]:
        pyproject_path = tmp_path / "project" / "pyproject.toml"
        home_path = tmp_path / "home" / "vision_tags.toml"
        pyproject_path.parent.mkdir(parents=True, exist_ok=True)
        home_path.parent.mkdir(parents=True, exist_ok=True)
        if pyproject:
            pyproject_path.write_text(pyproject, encoding="utf-8")
        if home:
            home_path.write_text(home, encoding="utf-8")
        monkeypatch.setenv("VISION_TAGS_PYPROJECT_PATH", str(pyproject_path))
        monkeypatch.setenv("VISION_TAGS_CONFIG_HOME", str(home_path))
        return pyproject_path, home_path

    return _write


# --- Pipeline Fixtures ---
@pytest.fixture
def assembler() -> ResultAssembler:
    """Assembler with default, file- and env-independent configuration."""
    return ResultAssembler(RecoveryConfig())


@pytest.fixture
def make_assembler() -> Callable[..., ResultAssembler]:
    """Factory for assemblers with specific configuration values."""

    def _make(**overrides) -> ResultAssembler:
        return ResultAssembler(RecoveryConfig(**overrides))

    return _make


@pytest.fixture
def payload_text() -> str:
    """A well-formed payload as the generator should have produced it."""
    return json.dumps(
        {"caption": "c", "objects": [{"name": "a", "confidence": "high"}]},
        separators=(",", ":"),
    )


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Behavioral guarantees of the public result shape",
        "integration: Component integration tests",
        "allow_env_pollution: Keep VISION_TAGS_* environment variables",
        "allow_real_config_files: Read real home and project config files",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)
