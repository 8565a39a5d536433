# stackmount package
# Stacks an encfs decrypted view on top of an sshfs remote mount

from .config import StackMountConfig, load_config, resolve_config
from .core import StackMountManager
from .errors import (
    AlreadyMountedError,
    BusyError,
    CommandExecutionError,
    CompositeUnmountError,
    ConfigError,
    DependencyError,
    DirectoryPermissionError,
    MountError,
    MountPointError,
    StackMountError,
    UnmountError,
)
from .mounting import MountOrchestrator
from .paths import MountPaths, derive_paths
from .version import __version__

__all__ = [
    "__version__",
    "StackMountConfig",
    "load_config",
    "resolve_config",
    "StackMountManager",
    "MountOrchestrator",
    "MountPaths",
    "derive_paths",
    "StackMountError",
    "ConfigError",
    "DependencyError",
    "MountError",
    "AlreadyMountedError",
    "UnmountError",
    "BusyError",
    "CompositeUnmountError",
    "DirectoryPermissionError",
    "MountPointError",
    "CommandExecutionError",
]
