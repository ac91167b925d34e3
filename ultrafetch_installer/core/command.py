# ultrafetch_installer/core/command.py

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Collection, Mapping

from ultrafetch_installer.core.logger import LoggerProxy

log = LoggerProxy(__name__)


class CommandResult:
    """Holds the result of a command execution."""

    def __init__(
        self,
        returncode: int,
        stdout: str,
        stderr: str,
        success: bool,
        timed_out: bool = False,
    ):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.success = success  # True if returncode is in ok_codes (or if check=False)
        self.timed_out = timed_out

    def __bool__(self) -> bool:
        """Allows treating the result object as boolean for success."""
        return self.success


def command_exists(name: str) -> bool:
    """True if `name` resolves on the executable search path."""
    return shutil.which(name) is not None


def run_command(
    cmd_list: list[str],
    check: bool = True,  # If True, an exit code outside ok_codes is considered failure
    capture: bool = True,  # Capture stdout/stderr
    text: bool = True,  # Decode output as text
    cwd: str | None = None,  # Working directory
    env: Mapping[str, str] | None = None,  # Extra environment variables
    timeout: float | None = None,  # Seconds before the process is killed
    input_text: str | None = None,  # Fed to stdin
    ok_codes: Collection[int] = (0,),
) -> CommandResult:
    """
    Runs an external command using subprocess.

    Args:
        cmd_list: Command and arguments as a list of strings.
        check: If True, exit codes outside `ok_codes` indicate failure.
        capture: If True, capture stdout and stderr.
        text: If True, decode stdout/stderr as text.
        cwd: Directory to run the command in.
        env: Variables layered over the current environment.
        timeout: Kill the command after this many seconds.
        input_text: Text written to the command's stdin.
        ok_codes: Exit codes that count as success.

    Returns:
        CommandResult object with success status, return code, stdout, stderr.
    """
    cmd_str = shlex.join(cmd_list)  # Safely join args for logging
    log.debug(f"Running: {cmd_str}" + (f" in {cwd}" if cwd else ""))

    try:
        process = subprocess.run(
            cmd_list,
            check=False,  # We check manually based on the 'check' flag
            capture_output=capture,
            text=text,
            errors="replace" if text else None,  # undecodable bytes become U+FFFD
            cwd=cwd,
            env=dict(os.environ, **env) if env else None,
            timeout=timeout,
            input=input_text,
        )
    except FileNotFoundError:
        log.debug(f"Command not found: {cmd_list[0]}")
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=f"Command not found: {cmd_list[0]}",
            success=False,
        )
    except subprocess.TimeoutExpired:
        log.warning(f"Command timed out after {timeout}s: {cmd_str}")
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=f"Timed out after {timeout}s",
            success=False,
            timed_out=True,
        )
    except OSError as e:
        log.error(f"Could not start command: {cmd_str}: {e}")
        return CommandResult(returncode=-1, stdout="", stderr=str(e), success=False)

    stdout = process.stdout.strip() if process.stdout else ""
    stderr = process.stderr.strip() if process.stderr else ""

    if stdout:
        log.debug(f"STDOUT: {stdout}")
    if stderr:
        log.debug(f"STDERR (RC={process.returncode}): {stderr}")

    success = process.returncode in ok_codes

    if check and not success:
        log.debug(f"Command failed with exit code {process.returncode}: {cmd_str}")
        return CommandResult(process.returncode, stdout, stderr, success=False)

    # If check is False, or if check is True and RC is acceptable
    log.debug(f"Command finished with exit code {process.returncode}.")
    return CommandResult(process.returncode, stdout, stderr, success=success)
