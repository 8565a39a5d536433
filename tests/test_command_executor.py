"""
Test cases for the CommandExecutor module.
"""

import subprocess
from dataclasses import replace

import pytest

from stackmount.command_executor import (
    CommandExecutor,
    ICommandExecutor,
    MockCommandExecutor,
)
from stackmount.errors import CommandExecutionError, DependencyError


@pytest.fixture
def timed_config(sample_config):
    """sample_config with a 5 second driver timeout."""
    return replace(sample_config, command_timeout=5)


class TestCommandExecutorInterface:
    """Test cases for ICommandExecutor interface."""

    def test_interface_has_required_methods(self):
        """Test that ICommandExecutor interface has all required methods."""
        assert hasattr(ICommandExecutor, "execute")
        assert callable(ICommandExecutor.execute)


class TestCommandExecutorExecute:
    """Test cases for CommandExecutor.execute method."""

    def test_execute_successful_command(self, mocker, sample_config):
        """Test successful command execution."""
        executor = CommandExecutor(sample_config)
        mock_result = mocker.MagicMock(returncode=0)
        mock_subprocess = mocker.patch("subprocess.run", return_value=mock_result)

        result = executor.execute(["sshfs", "host:/root", "/mnt/host"])

        assert result == mock_result
        mock_subprocess.assert_called_once_with(
            ["sshfs", "host:/root", "/mnt/host"],
            check=True,
            capture_output=False,
            text=False,
        )

    def test_execute_never_uses_shell(self, mocker, sample_config):
        """Test that arguments with shell syntax are passed as one argv entry."""
        executor = CommandExecutor(sample_config)
        mock_subprocess = mocker.patch("subprocess.run")

        executor.execute(["encfs", "/mnt/x/.$(id)", "/mnt/y; rm -rf /"])

        args, kwargs = mock_subprocess.call_args
        assert args[0] == ["encfs", "/mnt/x/.$(id)", "/mnt/y; rm -rf /"]
        assert "shell" not in kwargs

    def test_execute_failed_command(self, mocker, sample_config):
        """Test failed command execution."""
        executor = CommandExecutor(sample_config)
        error = subprocess.CalledProcessError(
            returncode=1, cmd=["fusermount"], output="", stderr="not mounted\n"
        )
        mocker.patch("subprocess.run", side_effect=error)

        with pytest.raises(CommandExecutionError) as exc_info:
            executor.execute(["fusermount", "-u", "/mnt/host"])

        assert (
            str(exc_info.value)
            == "Command 'fusermount' failed with return code 1: not mounted"
        )

    def test_execute_failed_command_without_captured_stderr(self, mocker, sample_config):
        """Test that an uncaptured stderr gives an empty message."""
        executor = CommandExecutor(sample_config)
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(returncode=2, cmd=["encfs"]),
        )

        with pytest.raises(CommandExecutionError) as exc_info:
            executor.execute(["encfs", "/a", "/b"])

        assert exc_info.value.return_code == 2
        assert exc_info.value.message == ""

    def test_execute_bytes_stderr(self, mocker, sample_config):
        """Test that byte stderr is decoded."""
        executor = CommandExecutor(sample_config)
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(
                returncode=1, cmd=["sshfs"], stderr=b"read: Connection reset by peer\n"
            ),
        )

        with pytest.raises(CommandExecutionError) as exc_info:
            executor.execute(["sshfs", "h:/", "/m"], capture_output=True)

        assert exc_info.value.message == "read: Connection reset by peer"

    def test_execute_missing_executable(self, mocker, sample_config):
        """Test that a missing executable is a DependencyError."""
        executor = CommandExecutor(sample_config)
        mocker.patch("subprocess.run", side_effect=FileNotFoundError("sshfs"))

        with pytest.raises(DependencyError, match="sshfs is not installed"):
            executor.execute(["sshfs", "h:/", "/m"])


class TestCommandExecutorTimeout:
    """Test the bounded wait on driver commands."""

    def test_no_timeout_by_default(self, mocker, sample_config):
        """Test that no timeout is passed unless configured."""
        executor = CommandExecutor(sample_config)
        mock_subprocess = mocker.patch("subprocess.run")

        executor.execute(["sshfs", "h:/", "/m"])

        assert "timeout" not in mock_subprocess.call_args.kwargs

    def test_configured_timeout_passed(self, mocker, timed_config):
        """Test that the configured timeout reaches subprocess.run."""
        executor = CommandExecutor(timed_config)
        mock_subprocess = mocker.patch("subprocess.run")

        executor.execute(["sshfs", "h:/", "/m"])

        assert mock_subprocess.call_args.kwargs["timeout"] == 5

    def test_timeout_expired(self, mocker, timed_config):
        """Test that an expired timeout becomes a CommandExecutionError."""
        executor = CommandExecutor(timed_config)
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd=["sshfs"], timeout=5),
        )

        with pytest.raises(CommandExecutionError, match="timed out after 5 seconds"):
            executor.execute(["sshfs", "h:/", "/m"])


class TestMockCommandExecutor:
    """Test cases for MockCommandExecutor."""

    def test_records_commands(self):
        """Test that executed commands are recorded in order."""
        executor = MockCommandExecutor()
        executor.execute(["sshfs", "h:/", "/m"])
        executor.execute(["encfs", "/m/.x", "/c/x"])
        assert executor.executed_commands == [
            ["sshfs", "h:/", "/m"],
            ["encfs", "/m/.x", "/c/x"],
        ]

    def test_predefined_failure(self):
        """Test that a predefined non-zero result raises when checked."""
        executor = MockCommandExecutor()
        executor.set_command_result(
            "fusermount -u /m",
            subprocess.CompletedProcess(
                args=[], returncode=1, stdout="", stderr="Device or resource busy"
            ),
        )
        with pytest.raises(CommandExecutionError, match="Device or resource busy"):
            executor.execute(["fusermount", "-u", "/m"])

