"""
Pytest fixtures and configuration for stackmount tests.

This file contains shared fixtures and test configuration following pytest best practices.
"""

from pathlib import Path

import pytest

from stackmount.config import DEFAULT_DIR_NAME, StackMountConfig, resolve_config
from stackmount.logging import StackMountLogger
from stackmount.mounting import MountOrchestrator
from stackmount.paths import derive_paths
from stackmount.tool_adapters import MockDriverAdapter


class ConfigFileBuilder:
    """Builder for stackmount config file contents."""

    def __init__(self):
        self._lines: list[str] = []

    def with_value(self, name: str, value: str) -> "ConfigFileBuilder":
        """Add a NAME=value line."""
        self._lines.append(f"{name}={value}")
        return self

    def with_line(self, line: str) -> "ConfigFileBuilder":
        """Add a raw line (comments, junk, malformed assignments)."""
        self._lines.append(line)
        return self

    def build(self) -> str:
        """Return the file contents."""
        return "\n".join(self._lines) + "\n"

    def write(self, path: Path) -> Path:
        """Write the file contents to path."""
        path.write_text(self.build())
        return path


@pytest.fixture
def home(tmp_path):
    """An isolated $HOME."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def env(home, tmp_path):
    """Minimal environment pointing CONFIG at a file that does not exist yet."""
    return {"HOME": str(home), "CONFIG": str(tmp_path / "stackmountrc")}


@pytest.fixture
def config_builder():
    """Provide the config file builder."""
    return ConfigFileBuilder()


@pytest.fixture
def test_config(home):
    """Configuration for remote host example.com with defaults otherwise."""
    return resolve_config({"HOME": str(home), "REMOTE_HOST": "example.com"})


@pytest.fixture
def mount_paths(test_config):
    """Paths derived from test_config."""
    return derive_paths(test_config)


@pytest.fixture
def logger():
    """Create a logger instance for testing."""
    return StackMountLogger("test_logger", verbose=False)


@pytest.fixture
def mock_adapter():
    """A driver adapter with nothing mounted."""
    return MockDriverAdapter()


@pytest.fixture
def mounted_adapter(mount_paths):
    """A driver adapter with both layers of the stack mounted."""
    return MockDriverAdapter(
        mounted={mount_paths.decrypted_path, mount_paths.host_mountpoint}
    )


@pytest.fixture
def orchestrator(mock_adapter, logger):
    """Orchestrator over the unmounted mock adapter."""
    return MountOrchestrator(mock_adapter, logger)


@pytest.fixture
def sample_config(tmp_path):
    """A hand-built configuration with short, readable paths."""
    return StackMountConfig(
        remote_host="vps.example.org",
        host_mountpoint=str(tmp_path / "mnt" / "vps"),
        remote_root="/home/alice",
        dir_name=DEFAULT_DIR_NAME,
        decrypted_mountpoint=str(tmp_path / "mnt"),
    )
