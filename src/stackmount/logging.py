"""
Logging functionality for the stackmount application.

This module provides centralized logging configuration and utilities
for consistent logging throughout the application.
"""

import logging
import sys


class StackMountLogger:
    """
    Custom logger for stackmount operations.

    This class provides structured, message-only console logging for the
    two mount layers and the driver commands behind them.
    """

    def __init__(self, name: str = "stackmount", verbose: bool = False):
        """Initialize the logger.

        Args:
            name: Name of the logger
            verbose: Enable verbose logging mode
        """
        self.logger = logging.getLogger(name)
        self.verbose = verbose

        # Set up logging format
        self._configure_logging()

    def _configure_logging(self) -> None:
        """Configure logging format and handlers."""
        # Clear any existing handlers to avoid duplicate logs
        self.logger.handlers.clear()

        log_level = logging.DEBUG if self.verbose else logging.INFO
        self.logger.setLevel(log_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)

        # Message only for clean output
        formatter = logging.Formatter("%(message)s")
        console_handler.setFormatter(formatter)

        self.logger.addHandler(console_handler)

    def log_mount_start(self, layer: str) -> None:
        """Log the start of a mount stage.

        Args:
            layer: Remote host or decrypted mountpoint being brought up
        """
        self.logger.info(f"Mounting {layer} ...")

    def log_mount_success(self, source: str, mount_point: str) -> None:
        """Log successful mount stage.

        Args:
            source: What was mounted (host:path or encrypted directory)
            mount_point: Where it was mounted
        """
        self.logger.info(f"Mounted: {source} -> {mount_point}")

    def log_mount_failed(self, stage: str, mount_point: str, error: str) -> None:
        """Log failed mount stage.

        Args:
            stage: Failing stage ("remote" or "encrypting")
            mount_point: Mountpoint the stage was bringing up
            error: Error message
        """
        self.logger.error(f"Mount failed ({stage}): {mount_point}: {error}")

    def log_unmount_success(self, mount_point: str) -> None:
        """Log successful unmount of one layer."""
        self.logger.info(f"Unmounted: {mount_point}")

    def log_unmount_failed(self, mount_point: str, error: str) -> None:
        """Log failed unmount of one layer."""
        self.logger.error(f"Unmount failed: {mount_point}: {error}")

    def log_unmount_skipped(self, mount_point: str) -> None:
        """Log a layer that was not mounted and therefore skipped."""
        self.logger.info(f"Not mounted, skipping: {mount_point}")

    def log_dependency_check(self, dependency: str, status: str = "available") -> None:
        """Log dependency check result.

        Args:
            dependency: Name of the executable being checked
            status: Status of the dependency (available/missing)
        """
        if status == "available":
            self.logger.debug(f"Dependency available: {dependency}")
        else:
            self.logger.error(f"Dependency missing: {dependency}")

    def log_command_execution(
        self, command: str, return_code: int | None = None, success: bool = True
    ) -> None:
        """Log command execution.

        Args:
            command: Command being executed
            return_code: Return code from command execution
            success: Whether the command was successful
        """
        if success:
            self.logger.debug(f"Command executed: {command}")
        elif return_code is None:
            self.logger.error(f"Command failed: {command}")
        else:
            self.logger.error(f"Command failed ({return_code}): {command}")

    def log_directory_operation(
        self, path: str, operation: str, success: bool = True
    ) -> None:
        """Log mountpoint directory creation or removal.

        Args:
            path: Directory being operated on
            operation: Type of operation (create/remove)
            success: Whether the operation was successful
        """
        if success:
            self.logger.debug(f"Directory {operation}: {path}")
        else:
            self.logger.warning(f"Directory {operation} failed: {path}")

    def log_directory_cleanup_failed(self, path: str, error: str) -> None:
        """Log an unmounted mountpoint whose directory could not be removed."""
        self.logger.warning(f"Could not remove directory {path}: {error}")

    def log_directory_kept(self, path: str, error: str) -> None:
        """Log an idle mountpoint directory left in place (non-empty or denied)."""
        self.logger.debug(f"Directory left in place: {path}: {error}")

    def log_config_source(self, path: str, loaded: bool) -> None:
        """Log whether the optional config file was read."""
        if loaded:
            self.logger.debug(f"Config file loaded: {path}")
        else:
            self.logger.debug(f"Config file not readable, using environment: {path}")


def get_logger(verbose: bool = False) -> StackMountLogger:
    """Get a configured logger instance.

    Args:
        verbose: Enable verbose logging mode

    Returns:
        Configured StackMountLogger instance
    """
    return StackMountLogger(verbose=verbose)
