"""
Dependency checking logic for stackmount.

This module checks that the FUSE driver executables are available
before any mount or unmount is attempted.
"""

import platform
import shutil
from typing import Optional

from .config import StackMountConfig
from .errors import DependencyError
from .logging import get_logger

MOUNT_COMMANDS = ["sshfs", "encfs"]
UNMOUNT_COMMANDS = ["fusermount"]


def _check_single_command(cmd: str) -> bool:
    """Pure function to check a single command."""
    return shutil.which(cmd) is not None


def check_commands(
    commands: list[str], config: Optional[StackMountConfig] = None, logger=None
) -> None:
    """Check if required commands are available."""
    verbose = config.verbose if config else False
    if logger is None:
        logger = get_logger(verbose)

    missing_commands = [cmd for cmd in commands if not _check_single_command(cmd)]

    if missing_commands:
        missing_cmd = missing_commands[0]
        logger.log_dependency_check(missing_cmd, "missing")
        raise DependencyError(
            f"{missing_cmd} is not installed or not in PATH. "
            f"Please install {missing_cmd} to use this script."
        )

    if verbose:
        for cmd in commands:
            logger.log_dependency_check(cmd, "available")


def check_platform() -> None:
    """FUSE mount stacking is only supported on Linux."""
    current_os = platform.system().lower()
    if current_os != "linux":
        raise DependencyError(
            f"This script is currently only supported on Linux. "
            f"Detected OS: {current_os}"
        )


def check_mount_dependencies(
    config: Optional[StackMountConfig] = None, logger=None
) -> None:
    """Check for the executables needed to mount and later unmount the stack."""
    check_platform()
    check_commands(MOUNT_COMMANDS + UNMOUNT_COMMANDS, config, logger)


def check_unmount_dependencies(
    config: Optional[StackMountConfig] = None, logger=None
) -> None:
    """Check for the executables needed to unmount the stack."""
    check_platform()
    check_commands(UNMOUNT_COMMANDS, config, logger)
