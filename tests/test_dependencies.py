"""
Test cases for the dependencies module.

This module tests the driver executable and platform checks.
"""

import pytest

from stackmount.dependencies import (
    MOUNT_COMMANDS,
    UNMOUNT_COMMANDS,
    check_commands,
    check_mount_dependencies,
    check_platform,
    check_unmount_dependencies,
)
from stackmount.errors import DependencyError
from stackmount.logging import get_logger


def which_for(available):
    """Build a shutil.which replacement that only finds the given commands."""

    def which(cmd):
        return f"/usr/bin/{cmd}" if cmd in available else None

    return which


class TestCheckCommands:
    """Test check_commands."""

    def test_all_commands_available(self, mocker, sample_config):
        """Test that nothing is raised when every command is found."""
        mocker.patch("stackmount.dependencies.shutil.which", return_value="/usr/bin/x")

        # This should not raise an exception
        check_commands(["sshfs", "encfs"], sample_config, get_logger())

    def test_missing_command(self, mocker, sample_config):
        """Test that a missing command raises DependencyError naming it."""
        mocker.patch(
            "stackmount.dependencies.shutil.which", side_effect=which_for({"sshfs"})
        )

        with pytest.raises(DependencyError, match="encfs is not installed or not in PATH"):
            check_commands(["sshfs", "encfs"], sample_config, get_logger())

    def test_first_missing_command_reported(self, mocker):
        """Test that the first missing command is the one reported."""
        mocker.patch("stackmount.dependencies.shutil.which", return_value=None)

        with pytest.raises(DependencyError, match="^sshfs"):
            check_commands(["sshfs", "encfs"])

    def test_missing_command_logged(self, mocker, logger):
        """Test that a missing command is logged as an error."""
        mocker.patch("stackmount.dependencies.shutil.which", return_value=None)
        mock_error = mocker.patch.object(logger.logger, "error")

        with pytest.raises(DependencyError):
            check_commands(["fusermount"], logger=logger)

        mock_error.assert_called_once_with("Dependency missing: fusermount")

    def test_defaults_without_config_or_logger(self, mocker):
        """Test check_commands with default parameters (None)."""
        mocker.patch("stackmount.dependencies.shutil.which", return_value="/usr/bin/x")

        check_commands(["fusermount"])


class TestCheckPlatform:
    """Test check_platform."""

    def test_linux(self, mocker):
        """Test that Linux passes."""
        mocker.patch("stackmount.dependencies.platform.system", return_value="Linux")
        check_platform()

    @pytest.mark.parametrize("system", ["Darwin", "Windows", "FreeBSD"])
    def test_non_linux(self, mocker, system):
        """Test that other systems are rejected."""
        mocker.patch("stackmount.dependencies.platform.system", return_value=system)

        with pytest.raises(DependencyError, match="currently only supported on Linux"):
            check_platform()


class TestActionDependencies:
    """Test the per-action dependency sets."""

    @pytest.fixture(autouse=True)
    def linux(self, mocker):
        """Pretend to run on Linux."""
        mocker.patch("stackmount.dependencies.platform.system", return_value="Linux")

    def test_mount_needs_every_driver(self, mocker):
        """Test that mounting checks sshfs, encfs and fusermount."""
        mock_which = mocker.patch(
            "stackmount.dependencies.shutil.which", return_value="/usr/bin/x"
        )

        check_mount_dependencies()

        checked = [call.args[0] for call in mock_which.call_args_list]
        assert checked == MOUNT_COMMANDS + UNMOUNT_COMMANDS

    def test_mount_fails_without_encfs(self, mocker):
        """Test that a host without encfs cannot mount."""
        mocker.patch(
            "stackmount.dependencies.shutil.which",
            side_effect=which_for({"sshfs", "fusermount"}),
        )

        with pytest.raises(DependencyError, match="encfs"):
            check_mount_dependencies()

    def test_unmount_only_needs_fusermount(self, mocker):
        """Test that unmounting works without sshfs or encfs installed."""
        mocker.patch(
            "stackmount.dependencies.shutil.which",
            side_effect=which_for({"fusermount"}),
        )

        check_unmount_dependencies()

    def test_unmount_fails_without_fusermount(self, mocker):
        """Test that unmounting requires fusermount."""
        mocker.patch(
            "stackmount.dependencies.shutil.which",
            side_effect=which_for({"sshfs", "encfs"}),
        )

        with pytest.raises(DependencyError, match="fusermount"):
            check_unmount_dependencies()
