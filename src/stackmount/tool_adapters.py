"""
Driver adapters for stackmount.

This module wraps the external FUSE drivers (sshfs, encfs, fusermount) and
the mountpoint directory primitives behind one interface, so the mount
orchestrator never builds command lines itself.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .command_executor import ICommandExecutor
from .config import StackMountConfig
from .errors import (
    BusyError,
    CommandExecutionError,
    DirectoryPermissionError,
    MountCommandExecutionError,
    MountPointError,
    UnmountCommandExecutionError,
)
from .logging import get_logger

PROC_MOUNTS = Path("/proc/self/mounts")

SSHFS_OPTIONS = ["-o", "compression=yes"]

BUSY_MARKER = "busy"


class IDriverAdapter(ABC):
    """Interface for the external mount drivers."""

    @abstractmethod
    def mount_remote(self, host: str, remote_root: str, mount_point: str) -> None:
        """Mount host:remote_root onto mount_point."""
        pass

    @abstractmethod
    def mount_encrypting(self, encrypted_path: str, decrypted_path: str) -> None:
        """Mount the decrypted view of encrypted_path onto decrypted_path."""
        pass

    @abstractmethod
    def unmount(self, mount_point: str) -> None:
        """Unmount a FUSE filesystem."""
        pass

    @abstractmethod
    def ensure_directory(self, path: str) -> None:
        """Create a directory and its parents if missing."""
        pass

    @abstractmethod
    def remove_directory(self, path: str) -> None:
        """Remove an empty directory."""
        pass

    @abstractmethod
    def is_mounted(self, path: str) -> bool:
        """Check whether path is a live mountpoint."""
        pass


def _unescape_mount_field(field: str) -> str:
    """Decode the octal escapes (\\040 etc.) used in /proc/mounts."""
    return (
        field.replace("\\040", " ")
        .replace("\\011", "\t")
        .replace("\\012", "\n")
        .replace("\\134", "\\")
    )


def _canonical_mount_path(path: str) -> str:
    # Resolve the parent only; stat on a stale FUSE mount fails.
    path = os.path.normpath(os.path.abspath(path))
    return os.path.join(
        os.path.realpath(os.path.dirname(path)), os.path.basename(path)
    )


def read_mount_table(proc_mounts: Path = PROC_MOUNTS) -> Optional[set[str]]:
    """Return the set of active mountpoints, or None if the table is unavailable."""
    try:
        lines = proc_mounts.read_text(encoding="utf-8").splitlines()
    except OSError:
        return None

    mount_points = set()
    for line in lines:
        parts = line.split()
        if len(parts) >= 2:
            mount_points.add(_unescape_mount_field(parts[1]))
    return mount_points


class FuseDriverAdapter(IDriverAdapter):
    """Concrete driver adapter using sshfs, encfs and fusermount."""

    def __init__(self, executor: ICommandExecutor, config: StackMountConfig):
        self.executor = executor
        self.config = config
        self.logger = get_logger(config.verbose)

    def mount_remote(self, host: str, remote_root: str, mount_point: str) -> None:
        """Mount host:remote_root onto mount_point with sshfs."""
        source = f"{host}:{remote_root}"
        command = ["sshfs", source, mount_point] + SSHFS_OPTIONS

        try:
            self.executor.execute(command, check=True)
        except CommandExecutionError as e:
            raise MountCommandExecutionError(
                "sshfs",
                e.return_code,
                f"Failed to mount {source} to {mount_point}: {e.message}",
            ) from e

    def mount_encrypting(self, encrypted_path: str, decrypted_path: str) -> None:
        """Mount the decrypted view with encfs.

        Output is not captured: encfs prompts for the volume password on
        the terminal.
        """
        command = ["encfs", encrypted_path, decrypted_path]

        try:
            self.executor.execute(command, check=True)
        except CommandExecutionError as e:
            raise MountCommandExecutionError(
                "encfs",
                e.return_code,
                f"Failed to mount {encrypted_path} to {decrypted_path}: {e.message}",
            ) from e

    def unmount(self, mount_point: str) -> None:
        """Unmount with fusermount -u, raising BusyError if the filesystem is in use."""
        command = ["fusermount", "-u", mount_point]

        try:
            self.executor.execute(command, check=True, capture_output=True, text=True)
        except CommandExecutionError as e:
            if BUSY_MARKER in e.message.lower():
                raise BusyError(mount_point, e.message) from e
            raise UnmountCommandExecutionError(
                "fusermount",
                e.return_code,
                f"Failed to unmount {mount_point}: {e.message}",
            ) from e

    def ensure_directory(self, path: str) -> None:
        """Create path and missing parents; succeeds if it already exists."""
        try:
            os.makedirs(path, exist_ok=True)
        except PermissionError as e:
            self.logger.log_directory_operation(path, "create", success=False)
            raise DirectoryPermissionError(path, e.strerror or str(e)) from e
        except OSError as e:
            self.logger.log_directory_operation(path, "create", success=False)
            raise MountPointError(f"Could not create directory {path}: {e}") from e

        if self.config.verbose:
            self.logger.log_directory_operation(path, "create")

    def remove_directory(self, path: str) -> None:
        """Remove an empty mountpoint directory. Never recursive.

        A directory that is already gone counts as removed. Other failures
        are raised for the caller to report.
        """
        try:
            os.rmdir(path)
        except FileNotFoundError:
            return
        except PermissionError as e:
            raise DirectoryPermissionError(path, e.strerror or str(e)) from e
        except OSError as e:
            raise MountPointError(f"Could not remove directory {path}: {e}") from e

        if self.config.verbose:
            self.logger.log_directory_operation(path, "remove")

    def is_mounted(self, path: str) -> bool:
        """Check the kernel mount table, falling back to os.path.ismount."""
        mount_points = read_mount_table()
        if mount_points is None:
            return os.path.ismount(path)
        return _canonical_mount_path(path) in mount_points


class MockDriverAdapter(IDriverAdapter):
    """Mock driver adapter for testing.

    Records every call in order and keeps an in-memory view of mounted
    paths and created directories. Failures are configured per operation,
    optionally per path.
    """

    def __init__(self, mounted: Optional[set[str]] = None):
        self.calls: list[tuple] = []
        self.mounted: set[str] = set(mounted or ())
        self.directories: set[str] = set()
        self.failures: dict[tuple[str, Optional[str]], Exception] = {}

    def set_failure(
        self, operation: str, error: Exception, path: Optional[str] = None
    ) -> None:
        """Make operation raise error (for one path, or for every path)."""
        self.failures[(operation, path)] = error

    def _maybe_fail(self, operation: str, path: str) -> None:
        error = self.failures.get((operation, path)) or self.failures.get(
            (operation, None)
        )
        if error is not None:
            raise error

    def operations(self) -> list[str]:
        """Names of the recorded calls, in order."""
        return [call[0] for call in self.calls]

    def mount_remote(self, host: str, remote_root: str, mount_point: str) -> None:
        self.calls.append(("mount_remote", host, remote_root, mount_point))
        self._maybe_fail("mount_remote", mount_point)
        self.mounted.add(mount_point)

    def mount_encrypting(self, encrypted_path: str, decrypted_path: str) -> None:
        self.calls.append(("mount_encrypting", encrypted_path, decrypted_path))
        self._maybe_fail("mount_encrypting", decrypted_path)
        self.mounted.add(decrypted_path)

    def unmount(self, mount_point: str) -> None:
        self.calls.append(("unmount", mount_point))
        self._maybe_fail("unmount", mount_point)
        self.mounted.discard(mount_point)

    def ensure_directory(self, path: str) -> None:
        self.calls.append(("ensure_directory", path))
        self._maybe_fail("ensure_directory", path)
        self.directories.add(path)

    def remove_directory(self, path: str) -> None:
        self.calls.append(("remove_directory", path))
        self._maybe_fail("remove_directory", path)
        self.directories.discard(path)

    def is_mounted(self, path: str) -> bool:
        return path in self.mounted
