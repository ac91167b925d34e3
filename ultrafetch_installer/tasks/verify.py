# ultrafetch_installer/tasks/verify.py

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from ultrafetch_installer.core.command import run_command
from ultrafetch_installer.core.errors import VerificationError
from ultrafetch_installer.core.logger import LoggerProxy
from ultrafetch_installer.core.registry import task
from ultrafetch_installer.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)


@dataclass
class VerificationOutcome:
    passed: bool
    failure_reason: str | None = None
    warnings: list[str] = field(default_factory=list)
    info: str | None = None  # version string reported by the artifact
    resolved_path: str | None = None


def _same_file(a: str, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def verify(
    destination: Path,
    command_name: str | None = None,
    version_timeout: float = 10,
) -> VerificationOutcome:
    """
    Check the installed artifact. Only "not on PATH" fails verification;
    permission and version problems come back as warnings.
    """
    command_name = command_name or destination.name
    resolved = shutil.which(command_name)
    if resolved is None:
        return VerificationOutcome(
            passed=False,
            failure_reason=f"Installation failed: '{command_name}' command not found",
        )

    outcome = VerificationOutcome(passed=True, resolved_path=resolved)
    log.debug(f"{command_name} resolves to {resolved}")

    if not _same_file(resolved, destination):
        outcome.warnings.append(
            f"'{command_name}' resolves to {resolved}, not {destination}; "
            "another copy appears earlier in PATH"
        )

    if not os.access(destination, os.X_OK):
        outcome.warnings.append("File exists but may not be executable")

    # Older releases do not know --version; that is not an error
    result = run_command([str(destination), "--version"], check=False, timeout=version_timeout)
    if result.success and result.stdout:
        outcome.info = result.stdout.splitlines()[0]

    return outcome


@task("Installation Verification")
def verify_task(ctx: TaskContext) -> TaskResult:
    name = "Installation Verification"
    config = ctx["config"]

    outcome = verify(config.install_path, config.command_name, config.version_timeout)
    if not outcome.passed:
        raise VerificationError(
            outcome.failure_reason or "Installation verification failed",
            hint=f"Try adding {config.install_path.parent} to your PATH",
        )

    messages: list[tuple[Severity, str]] = [(Severity.INFO, "Command is accessible in PATH")]
    if outcome.warnings:
        messages.extend((Severity.WARNING, w) for w in outcome.warnings)
    else:
        messages.append((Severity.INFO, "File permissions are correct"))
    if outcome.info:
        messages.append((Severity.INFO, f"UltraFetch version: {outcome.info}"))

    return TaskResult(name, True, False, messages, details=outcome)
