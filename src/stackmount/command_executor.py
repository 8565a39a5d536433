"""
Command execution abstraction for stackmount.

This module provides an abstraction layer for executing the external
mount drivers, making the orchestration code testable without FUSE.
"""

import shlex
import subprocess
from abc import ABC, abstractmethod

from .config import StackMountConfig
from .errors import CommandExecutionError, DependencyError
from .logging import get_logger


class ICommandExecutor(ABC):
    """Interface for command execution."""

    @abstractmethod
    def execute(
        self,
        command: list[str],
        check: bool = True,
        capture_output: bool = False,
        text: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Execute a command and return the result."""
        pass


class CommandExecutor(ICommandExecutor):
    """Concrete implementation of command executor.

    Commands are always run from an argument list, never through a shell,
    so configuration values cannot be interpreted as shell syntax.
    """

    def __init__(self, config: StackMountConfig):
        self.config = config
        self.logger = get_logger(config.verbose)

    def execute(
        self,
        command: list[str],
        check: bool = True,
        capture_output: bool = False,
        text: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Execute a command and return the result."""
        command_line = shlex.join(command)
        if self.config.verbose:
            self.logger.log_command_execution(command_line)

        if self.config.command_timeout is not None:
            kwargs.setdefault("timeout", self.config.command_timeout)

        try:
            result = subprocess.run(
                command, check=check, capture_output=capture_output, text=text, **kwargs
            )
            if self.config.verbose:
                self.logger.log_command_execution(command_line, success=True)
            return result
        except subprocess.CalledProcessError as e:
            self.logger.log_command_execution(command_line, e.returncode, success=False)
            raise CommandExecutionError(command[0], e.returncode, _stderr_text(e.stderr))
        except subprocess.TimeoutExpired as e:
            self.logger.log_command_execution(command_line, success=False)
            raise CommandExecutionError(
                command[0], -1, f"timed out after {e.timeout} seconds"
            )
        except FileNotFoundError:
            raise DependencyError(
                f"{command[0]} is not installed or not in PATH. "
                f"Please install {command[0]} to use this script."
            )


def _stderr_text(stderr) -> str:
    if stderr is None:
        return ""
    if isinstance(stderr, bytes):
        return stderr.decode(errors="replace").strip()
    return stderr.strip()


class MockCommandExecutor(ICommandExecutor):
    """Mock implementation of command executor for testing."""

    def __init__(self):
        self.executed_commands = []
        self.command_results = {}

    def execute(
        self,
        command: list[str],
        check: bool = True,
        capture_output: bool = False,
        text: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Mock command execution."""
        self.executed_commands.append(command)

        command_key = " ".join(command)
        if command_key in self.command_results:
            result = self.command_results[command_key]
            if check and result.returncode != 0:
                raise CommandExecutionError(
                    command[0], result.returncode, _stderr_text(result.stderr)
                )
            return result

        return subprocess.CompletedProcess(
            args=command, returncode=0, stdout="", stderr=""
        )

    def set_command_result(self, command: str, result: subprocess.CompletedProcess):
        """Set a predefined result for a command."""
        self.command_results[command] = result

