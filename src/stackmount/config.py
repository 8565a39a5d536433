"""
Configuration management for the stackmount application.

Values are resolved once per run from compiled-in defaults, environment
variables and an optional ``NAME=value`` config file, in increasing order
of precedence. The config file is never evaluated: only five whitelisted
names are read, and only values made of printable ASCII characters are
applied, literally.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError

DEFAULT_REMOTE_HOST = "localhost"
DEFAULT_DIR_NAME = "c1e05ee6-e6f2-47af-b4fe-123d8f48666c"
DEFAULT_CONFIG_FILE = ".stackmountrc"

CONFIG_ENV_VAR = "CONFIG"

# Config file / environment name -> StackMountConfig field
CONFIG_FIELDS = {
    "REMOTE_HOST": "remote_host",
    "REMOTE_ROOT": "remote_root",
    "HOST_MOUNTPOINT": "host_mountpoint",
    "DIRNAME": "dir_name",
    "DECRYPTED_MOUNTPOINT": "decrypted_mountpoint",
}

# [[:print:]] in the C locale
_PRINTABLE_VALUE = r"[\x20-\x7e]+"

_CONFIG_LINE_PATTERNS = {
    name: re.compile(rf"{name}=({_PRINTABLE_VALUE})") for name in CONFIG_FIELDS
}


@dataclass(frozen=True)
class StackMountConfig:
    """
    Immutable configuration for one stackmount run.

    Attributes:
        remote_host: SSH-style target host (default: "localhost")
        host_mountpoint: Local mountpoint for the remote filesystem
        remote_root: Remote path to mount (default: $HOME)
        dir_name: Name of the encrypted/decrypted directory pair
        decrypted_mountpoint: Parent directory of the decrypted view
        verbose: Enable verbose output (default: False)
        command_timeout: Seconds to wait for each driver call (default: None,
            wait forever)
    """

    remote_host: str
    host_mountpoint: str
    remote_root: str
    dir_name: str
    decrypted_mountpoint: str
    verbose: bool = False
    command_timeout: Optional[float] = None

    def __post_init__(self):
        """Validate configuration values after initialization."""
        for name in CONFIG_FIELDS.values():
            if not getattr(self, name):
                raise ValueError(f"{name} cannot be empty")

        for name in ("host_mountpoint", "decrypted_mountpoint"):
            if not os.path.isabs(getattr(self, name)):
                raise ValueError(
                    f"{name} must be an absolute path, got: {getattr(self, name)}"
                )

        # Would be read as an option by sshfs
        if self.remote_host.startswith("-"):
            raise ValueError(f"remote_host cannot start with '-': {self.remote_host}")

        if "/" in self.dir_name or self.dir_name in (".", ".."):
            raise ValueError(f"dir_name must be a plain name, got: {self.dir_name}")

        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ValueError(
                f"command_timeout must be positive, got: {self.command_timeout}"
            )


def home_directory(env: Mapping[str, str]) -> str:
    """Return $HOME from the given environment, falling back to the user's home."""
    return env.get("HOME") or str(Path.home())


def config_file_path(env: Mapping[str, str]) -> Path:
    """Location of the optional config file ($CONFIG or ~/.stackmountrc)."""
    configured = env.get(CONFIG_ENV_VAR)
    if configured:
        return Path(configured)
    return Path(home_directory(env)) / DEFAULT_CONFIG_FILE


def read_config_file(path: Path) -> Optional[str]:
    """Read the config file, or return None if it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def parse_config_text(text: str) -> dict[str, str]:
    """Extract whitelisted ``NAME=value`` assignments from config file text.

    A line is applied only when it consists entirely of a whitelisted name,
    ``=`` and one or more printable characters. The value is returned as-is;
    ``$HOME``, ``~`` or ``$(...)`` stay literal text. When a name is assigned
    on several lines, the last assignment wins.

    Args:
        text: Contents of the config file

    Returns:
        Mapping of config file names (e.g. "REMOTE_HOST") to values
    """
    values: dict[str, str] = {}
    for line in text.splitlines():
        for name, pattern in _CONFIG_LINE_PATTERNS.items():
            match = pattern.fullmatch(line)
            if match:
                values[name] = match.group(1)
    return values


def resolve_config(
    env: Mapping[str, str],
    config_file_contents: Optional[str] = None,
    verbose: bool = False,
    command_timeout: Optional[float] = None,
) -> StackMountConfig:
    """Merge defaults, environment and config file into a StackMountConfig.

    Args:
        env: Environment mapping (usually os.environ)
        config_file_contents: Text of the config file, or None if there is none
        verbose: Enable verbose output
        command_timeout: Seconds to wait for each driver call

    Returns:
        Resolved, immutable configuration

    Raises:
        ConfigError: If the merged values violate the configuration invariants
    """
    home = home_directory(env)
    file_values = parse_config_text(config_file_contents or "")

    def pick(name: str, default: Optional[str]) -> Optional[str]:
        return file_values.get(name) or env.get(name) or default

    # Defaults are fixed before the file is read, so a file-only
    # REMOTE_HOST does not rename the default host mountpoint.
    env_host = env.get("REMOTE_HOST") or DEFAULT_REMOTE_HOST
    values = {
        "remote_host": pick("REMOTE_HOST", DEFAULT_REMOTE_HOST),
        "host_mountpoint": pick(
            "HOST_MOUNTPOINT", os.path.join(home, "mnt", env_host)
        ),
        "remote_root": pick("REMOTE_ROOT", home),
        "dir_name": pick("DIRNAME", DEFAULT_DIR_NAME),
        "decrypted_mountpoint": pick("DECRYPTED_MOUNTPOINT", os.path.join(home, "mnt")),
    }

    try:
        return StackMountConfig(
            verbose=verbose, command_timeout=command_timeout, **values
        )
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(
    env: Optional[Mapping[str, str]] = None,
    verbose: bool = False,
    command_timeout: Optional[float] = None,
    logger=None,
) -> StackMountConfig:
    """Resolve the configuration from the process environment and config file."""
    if env is None:
        env = os.environ

    path = config_file_path(env)
    contents = read_config_file(path)
    if logger:
        logger.log_config_source(str(path), contents is not None)

    return resolve_config(
        env, contents, verbose=verbose, command_timeout=command_timeout
    )
