"""
Error handling for the stackmount application.

This module defines custom exceptions and the functional Result type
returned by the mount orchestrator.
"""

# Functional error handling patterns
from typing import Any, Generic, Optional, TypeVar, Union


class StackMountError(Exception):
    """Base exception for all stackmount related errors."""

    pass


class DependencyError(StackMountError):
    """Exception raised when required driver executables are missing."""

    pass


class ConfigError(StackMountError):
    """Exception raised when configuration cannot be resolved."""

    pass


class MountPointError(StackMountError):
    """Exception raised when a mountpoint directory cannot be prepared."""

    pass


class DirectoryPermissionError(MountPointError, PermissionError):
    """Exception raised when creating or removing a directory is denied."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        self.message = message
        super().__init__(f"Permission denied for directory {path}: {message}")


class MountError(StackMountError):
    """Exception raised when a mount-up stage fails.

    Attributes:
        stage: Either "remote" (sshfs) or "encrypting" (encfs)
        path: The mountpoint the stage was bringing up
    """

    def __init__(self, stage: str, path: str, message: str = ""):
        self.stage = stage
        self.path = path
        self.message = message
        super().__init__(f"Mount stage '{stage}' failed for {path}: {message}")


class AlreadyMountedError(StackMountError):
    """Exception raised when a layer of the stack is already a live mount."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} is already mounted")


class UnmountError(StackMountError):
    """Exception raised when unmounting operations fail."""

    pass


class BusyError(UnmountError):
    """Exception raised when a filesystem is in use and cannot be unmounted."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        self.message = message
        super().__init__(f"Filesystem is busy: {path}")


class CompositeUnmountError(UnmountError):
    """Aggregates independent per-layer unmount failures.

    Attributes:
        failures: List of (path, error) pairs, in the order the layers
            were processed
    """

    def __init__(self, failures: Optional[list[tuple[str, Exception]]] = None):
        self.failures = list(failures or [])
        if self.failures:
            details = "; ".join(f"{path}: {error}" for path, error in self.failures)
            message = f"{len(self.failures)} unmount(s) failed: {details}"
        else:
            message = "No unmount failures"
        super().__init__(message)

    @property
    def paths(self) -> list[str]:
        """Paths whose unmount failed."""
        return [path for path, _ in self.failures]


class CommandExecutionError(StackMountError):
    """Exception raised when command execution fails."""

    def __init__(self, command: str, return_code: int, message: str = ""):
        self.command = command
        self.return_code = return_code
        self.message = message
        super().__init__(
            f"Command '{command}' failed with return code {return_code}: {message}"
        )


class MountCommandExecutionError(CommandExecutionError):
    """Exception raised when sshfs or encfs execution fails."""

    pass


class UnmountCommandExecutionError(CommandExecutionError, UnmountError):
    """Exception raised when fusermount execution fails."""

    pass


T = TypeVar("T")
E = TypeVar("E", bound=Exception)


class Result(Generic[T, E]):
    """Functional result type for error handling."""

    def __init__(
        self, success: bool, value: Union[T, None] = None, error: Union[E, None] = None
    ):
        self.success = success
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        """Create a successful result."""
        return cls(True, value=value)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        """Create an error result."""
        return cls(False, error=error)

    def is_ok(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_err(self) -> bool:
        """Check if result is an error."""
        return not self.success

    def unwrap(self) -> T:
        """Get the value or raise the error."""
        if self.success:
            if self.value is None:
                raise ValueError("Result is successful but has no value")
            return self.value
        if self.error is None:
            raise ValueError("Result is an error but has no error value")
        raise self.error


def safe_operation(fn, *args, **kwargs) -> "Result[Any, Exception]":
    """Wrap a function call in a Result for functional error handling.

    Only StackMountError and OSError are captured; anything else is a
    programming error and propagates.
    """
    try:
        result = fn(*args, **kwargs)
        return Result.ok(result)
    except (StackMountError, OSError) as e:
        return Result.err(e)
