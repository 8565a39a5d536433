"""
Mount lifecycle orchestration for stackmount.

The remote (sshfs) layer is mounted first and the encrypting (encfs) layer
on top of it; unmounting runs in the reverse order. Driver failures are
returned as Result errors carrying the failing stage and path.
"""

from typing import Optional

from .config import StackMountConfig
from .errors import (
    AlreadyMountedError,
    CompositeUnmountError,
    MountError,
    Result,
    StackMountError,
    safe_operation,
)
from .logging import get_logger
from .paths import MountPaths
from .tool_adapters import IDriverAdapter

STAGE_REMOTE = "remote"
STAGE_ENCRYPTING = "encrypting"


class MountOrchestrator:
    """
    Drive the two-stage mount-up and reverse-order unmount sequences.

    The orchestrator keeps no mount state of its own. It asks the driver
    adapter which layers are live and treats a failed step as an unmet
    precondition for the next one.
    """

    def __init__(self, adapter: IDriverAdapter, logger=None, verbose: bool = False):
        self.adapter = adapter
        self.logger = logger if logger else get_logger(verbose)

    def _check_not_mounted(self, paths: MountPaths) -> Optional[AlreadyMountedError]:
        """Return an error if either layer of the stack is already live."""
        for path in (paths.decrypted_path, paths.host_mountpoint):
            if self.adapter.is_mounted(path):
                return AlreadyMountedError(path)
        return None

    def _run_stage(self, stage: str, mount_point: str, steps) -> Optional[MountError]:
        """Run the steps of one stage, stopping at the first failure."""
        for step, *args in steps:
            result = safe_operation(step, *args)
            if result.is_err():
                error = MountError(stage, mount_point, str(result.error))
                error.__cause__ = result.error
                self.logger.log_mount_failed(stage, mount_point, str(result.error))
                return error
        return None

    def perform_mount(
        self, config: StackMountConfig, paths: MountPaths
    ) -> "Result[MountPaths, StackMountError]":
        """Mount the remote layer, then the encrypting layer on top of it.

        A failure in the encrypting stage leaves the remote layer mounted;
        it is not rolled back. Run an unmount to clean up.

        Args:
            config: Resolved configuration
            paths: Paths derived from config

        Returns:
            Result holding the mounted paths, or AlreadyMountedError /
            MountError with the failing stage
        """
        conflict = self._check_not_mounted(paths)
        if conflict:
            self.logger.log_mount_failed("preflight", conflict.path, str(conflict))
            return Result.err(conflict)

        self.logger.log_mount_start(config.remote_host)
        error = self._run_stage(
            STAGE_REMOTE,
            paths.host_mountpoint,
            [
                (self.adapter.ensure_directory, paths.host_mountpoint),
                (
                    self.adapter.mount_remote,
                    config.remote_host,
                    config.remote_root,
                    paths.host_mountpoint,
                ),
            ],
        )
        if error:
            return Result.err(error)
        self.logger.log_mount_success(
            f"{config.remote_host}:{config.remote_root}", paths.host_mountpoint
        )

        self.logger.log_mount_start(paths.decrypted_path)
        error = self._run_stage(
            STAGE_ENCRYPTING,
            paths.decrypted_path,
            [
                (self.adapter.ensure_directory, paths.encrypted_path),
                (self.adapter.ensure_directory, paths.decrypted_path),
                (
                    self.adapter.mount_encrypting,
                    paths.encrypted_path,
                    paths.decrypted_path,
                ),
            ],
        )
        if error:
            return Result.err(error)
        self.logger.log_mount_success(paths.encrypted_path, paths.decrypted_path)

        return Result.ok(paths)

    def _unmount_layer(self, mount_point: str) -> Optional[Exception]:
        """Unmount one layer and remove its emptied directory."""
        if not self.adapter.is_mounted(mount_point):
            self.logger.log_unmount_skipped(mount_point)
            # A stage that failed part way can leave an empty mountpoint behind
            removal = safe_operation(self.adapter.remove_directory, mount_point)
            if removal.is_err():
                self.logger.log_directory_kept(mount_point, str(removal.error))
            return None

        result = safe_operation(self.adapter.unmount, mount_point)
        if result.is_err():
            self.logger.log_unmount_failed(mount_point, str(result.error))
            return result.error

        removal = safe_operation(self.adapter.remove_directory, mount_point)
        if removal.is_err():
            self.logger.log_directory_cleanup_failed(mount_point, str(removal.error))

        self.logger.log_unmount_success(mount_point)
        return None

    def perform_unmount(
        self, paths: MountPaths
    ) -> "Result[list[str], CompositeUnmountError]":
        """Unmount the decrypted view, then the remote host.

        Both layers are always attempted, in that order, whatever the
        outcome of the first.

        Args:
            paths: Paths of the stack to tear down

        Returns:
            Result holding the processed paths, or CompositeUnmountError
            naming each layer that failed
        """
        layers = [paths.decrypted_path, paths.host_mountpoint]
        failures = []

        for mount_point in layers:
            error = self._unmount_layer(mount_point)
            if error is not None:
                failures.append((mount_point, error))

        if failures:
            return Result.err(CompositeUnmountError(failures))
        return Result.ok(layers)
