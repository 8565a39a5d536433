"""
Core module for stackmount.

This module serves as a facade wiring configuration, path derivation,
driver adapters and the mount orchestrator together.
"""

from typing import Optional

from .command_executor import CommandExecutor
from .config import StackMountConfig
from .dependencies import check_mount_dependencies, check_unmount_dependencies
from .errors import CompositeUnmountError, Result, StackMountError
from .logging import get_logger
from .mounting import MountOrchestrator
from .paths import MountPaths, derive_paths
from .tool_adapters import FuseDriverAdapter, IDriverAdapter


class StackMountManager:
    """
    Main manager for the stacked sshfs/encfs mount.

    Dependency checks run per action, so unmounting does not require
    sshfs or encfs to be installed.
    """

    def __init__(
        self,
        config: StackMountConfig,
        adapter: Optional[IDriverAdapter] = None,
        logger=None,
    ):
        self.config = config
        self.logger = logger if logger else get_logger(config.verbose)
        self.paths: MountPaths = derive_paths(config)
        self.adapter = (
            adapter
            if adapter
            else FuseDriverAdapter(CommandExecutor(config), config)
        )
        self.orchestrator = MountOrchestrator(self.adapter, self.logger)

    def mount(self) -> "Result[MountPaths, StackMountError]":
        """Bring up the remote layer and the decrypted view."""
        check_mount_dependencies(self.config, self.logger)
        return self.orchestrator.perform_mount(self.config, self.paths)

    def unmount(self) -> "Result[list[str], CompositeUnmountError]":
        """Tear down the decrypted view and the remote layer."""
        check_unmount_dependencies(self.config, self.logger)
        return self.orchestrator.perform_unmount(self.paths)
