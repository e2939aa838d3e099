# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Subprocess execution utilities.

Every OS tool invoked by the collectors (sysctl, system_profiler, netsh,
PowerShell, ping, ...) goes through this module so that failures are
handled in one place:

- a missing binary or a non-zero exit is logged and returned as a failed
  ProcessResult, never raised
- output is always decoded as text with undecodable bytes replaced
- every command carries an upper execution time limit
"""

import logging
import os
import shutil
import subprocess  # nosec B404 # For process execution API
import time
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXECUTION_TIME = 300.0


class ProcessResult:
    """
    Container for subprocess execution results with metadata.
    """

    def __init__(
        self,
        returncode: int,
        stdout: str = "",
        stderr: str = "",
        command: List[str] = None,
        execution_time: float = 0.0,
        timed_out: bool = False,
        not_found: bool = False,
    ):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.command = command or []
        self.execution_time = execution_time
        self.timed_out = timed_out
        self.not_found = not_found

    @property
    def success(self) -> bool:
        """Check if the command executed successfully."""
        return self.returncode == 0 and not self.timed_out

    @property
    def failed(self) -> bool:
        """Check if the command failed."""
        return not self.success

    def __str__(self) -> str:
        status = "SUCCESS" if self.success else "FAILED"
        return f"ProcessResult(status={status}, returncode={self.returncode}, time={self.execution_time:.2f}s)"


class ProcessExecutor:
    """
    Synchronous subprocess executor used by all collectors.

    Commands are always executed without a shell and with their output
    captured. Failures are converted into ProcessResult objects.
    """

    def __init__(self, max_execution_time: float = DEFAULT_MAX_EXECUTION_TIME):
        """
        Initialize the process executor.

        Args:
            max_execution_time: Upper bound applied when no timeout is given
        """
        self.max_execution_time = max_execution_time

    def run(
        self,
        command: Union[str, List[str]],
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """
        Execute a command and capture its output.

        Args:
            command: Command to execute (string or list)
            timeout: Maximum execution time in seconds

        Returns:
            ProcessResult: Execution results with metadata
        """
        cmd_list = self._prepare_command(command)
        effective_timeout = timeout or self.max_execution_time
        command_str = " ".join(cmd_list)
        start_time = time.time()

        logger.debug(f"Executing command: {command_str} (timeout={effective_timeout})")

        try:
            completed = subprocess.run(  # nosec B603 # Shell is never used
                cmd_list,
                env=self._prepare_environment(),
                timeout=effective_timeout,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )

        except FileNotFoundError:
            logger.info(f"Command not found: {cmd_list[0]}")
            return ProcessResult(
                returncode=127,
                stderr=f"Command not found: {cmd_list[0]}",
                command=cmd_list,
                execution_time=time.time() - start_time,
                not_found=True,
            )

        except subprocess.TimeoutExpired:
            execution_time = time.time() - start_time
            logger.warning(f"Command timed out after {execution_time:.2f}s: {command_str}")
            return ProcessResult(
                returncode=-1,
                stderr=f"Command timed out after {effective_timeout}s",
                command=cmd_list,
                execution_time=execution_time,
                timed_out=True,
            )

        except OSError as e:
            logger.warning(f"Unexpected error executing command {command_str}: {e}")
            return ProcessResult(
                returncode=-1, stderr=str(e), command=cmd_list, execution_time=time.time() - start_time
            )

        result = ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            command=cmd_list,
            execution_time=time.time() - start_time,
        )
        if result.failed:
            logger.info(f"Command failed with exit code {result.returncode}: {command_str}")
            if result.stderr.strip():
                logger.debug(f"stderr: {result.stderr.strip()}")
        return result

    def _prepare_command(self, command: Union[str, List[str]]) -> List[str]:
        """Normalize the command into an argument list."""
        if isinstance(command, str):
            return command.split()
        if isinstance(command, (list, tuple)):
            return [str(arg) for arg in command]
        raise TypeError(f"Invalid command type: {type(command)}")

    def _prepare_environment(self) -> Dict[str, str]:
        """
        Prepare environment variables for subprocess execution.

        The C locale keeps tool output in English so the extraction
        patterns match regardless of the user's language settings.
        """
        safe_env = os.environ.copy()
        safe_env.setdefault("LC_ALL", "C")
        return safe_env


# Global executor instance
_global_executor = None


def get_executor() -> ProcessExecutor:
    """
    Get the global process executor instance.

    Returns:
        ProcessExecutor: Global executor instance
    """
    global _global_executor
    if _global_executor is None:
        _global_executor = ProcessExecutor()
    return _global_executor


def configure_executor(max_execution_time: float = DEFAULT_MAX_EXECUTION_TIME) -> None:
    """
    Replace the global executor with one using the given time limit.

    Args:
        max_execution_time: Maximum execution time for commands without a timeout
    """
    global _global_executor
    _global_executor = ProcessExecutor(max_execution_time=max_execution_time)


def run_command(
    command: Union[str, List[str]],
    timeout: Optional[float] = None,
) -> ProcessResult:
    """
    Execute a command with default settings.

    This is the primary function that should be used throughout the
    application for subprocess execution instead of direct subprocess calls.

    Args:
        command: Command to execute
        timeout: Execution timeout

    Returns:
        ProcessResult: Execution results
    """
    return get_executor().run(command=command, timeout=timeout)


def command_output(command: Union[str, List[str]], timeout: Optional[float] = None) -> Optional[str]:
    """
    Execute a command and return its stdout, or None when it failed.

    Args:
        command: Command to execute
        timeout: Execution timeout

    Returns:
        Optional[str]: Captured stdout of a successful command
    """
    result = run_command(command, timeout=timeout)
    if result.success:
        return result.stdout
    return None


def run_powershell(script: str, timeout: Optional[float] = None) -> Optional[str]:
    """
    Execute a PowerShell snippet and return its stdout, or None on failure.

    Args:
        script: PowerShell command text
        timeout: Execution timeout

    Returns:
        Optional[str]: Captured stdout of a successful invocation
    """
    return command_output(
        ["powershell", "-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass", "-Command", script],
        timeout=timeout,
    )


def check_command_available(command: str) -> bool:
    """
    Check if a command is available on the system.

    Args:
        command: Command name to check

    Returns:
        bool: True if command is available
    """
    return shutil.which(command) is not None
