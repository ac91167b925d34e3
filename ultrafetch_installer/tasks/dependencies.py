# ultrafetch_installer/tasks/dependencies.py

from __future__ import annotations

import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from ultrafetch_installer.core.errors import DependencyInstallError
from ultrafetch_installer.core.logger import LoggerProxy
from ultrafetch_installer.core.registry import task
from ultrafetch_installer.core.task import Severity, TaskContext, TaskResult
from ultrafetch_installer.tasks.packages import (
    PackageManager,
    PackageManagerKind,
    Which,
    package_manager_for,
)

log = LoggerProxy(__name__)

# command the artifact needs -> package that provides it
DEPENDENCY_SPEC: Mapping[str, str] = MappingProxyType(
    {
        "curl": "curl",
        "bc": "bc",
        "lscpu": "util-linux",
        "lspci": "pciutils",
        "sensors": "lm-sensors",
    }
)


class InstallResult(Enum):
    ALREADY_PRESENT = "already installed"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class DependencySummary:
    results: dict[str, InstallResult] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results.values() if r is InstallResult.FAILED)

    @property
    def installed(self) -> int:
        return sum(1 for r in self.results.values() if r is InstallResult.INSTALLED)

    @property
    def ok(self) -> int:
        return self.total - self.failed


def missing_dependencies(
    spec: Mapping[str, str] = DEPENDENCY_SPEC, which: Which | None = None
) -> dict[str, str]:
    which = which or shutil.which
    return {cmd: pkg for cmd, pkg in spec.items() if which(cmd) is None}


def install_dependency(
    command: str,
    package: str,
    manager: PackageManager,
    which: Which | None = None,
) -> InstallResult:
    """Install `package` unless `command` already resolves on PATH."""
    which = which or shutil.which
    if which(command) is not None:
        log.info(f"   ✓ {package} (already installed)")
        return InstallResult.ALREADY_PRESENT

    log.debug(f"Installing {package} to provide '{command}' via {manager.name}")
    try:
        manager.install(package)
    except DependencyInstallError as exc:
        log.warning(f"   ✗ {package} ({exc})")
        if exc.hint:
            log.debug(f"{package}: {exc.hint}")
        return InstallResult.FAILED

    log.info(f"   ✓ {package} (installed)")
    return InstallResult.INSTALLED


def install_dependencies(
    manager: PackageManager,
    spec: Mapping[str, str] = DEPENDENCY_SPEC,
    which: Which | None = None,
) -> DependencySummary:
    """Install every dependency in order. Failures are counted, never raised."""
    summary = DependencySummary()
    for command, package in spec.items():
        summary.results[command] = install_dependency(command, package, manager, which)
    return summary


@task("Package Repository Update")
def update_packages_task(ctx: TaskContext) -> TaskResult:
    name = "Package Repository Update"
    messages: list[tuple[Severity, str]] = []

    if not missing_dependencies():
        messages.append((Severity.INFO, "All dependencies present; repository refresh skipped"))
        return TaskResult(name, True, False, messages)

    manager = package_manager_for(ctx)
    log.info("Refreshing package lists...")
    try:
        result = manager.refresh()
    except DependencyInstallError as exc:
        messages.append((Severity.WARNING, str(exc)))
        return TaskResult(name, True, False, messages)

    if result.success:
        messages.append((Severity.INFO, "Package lists updated"))
    else:
        messages.append(
            (
                Severity.WARNING,
                f"Package list refresh failed (exit code {result.returncode}); continuing",
            )
        )
    return TaskResult(name, True, False, messages)


@task("Dependency Installation")
def install_dependencies_task(ctx: TaskContext) -> TaskResult:
    name = "Dependency Installation"
    messages: list[tuple[Severity, str]] = []

    manager = package_manager_for(ctx)
    if manager.kind is PackageManagerKind.UNKNOWN and missing_dependencies():
        messages.append(
            (Severity.WARNING, "No supported package manager found; missing packages are skipped")
        )
    log.info("Installing required packages...")
    summary = install_dependencies(manager)

    if summary.failed == 0:
        messages.append(
            (Severity.INFO, f"All dependencies installed ({summary.total}/{summary.total})")
        )
    else:
        messages.append(
            (
                Severity.WARNING,
                f"Partial installation: {summary.ok}/{summary.total} packages installed",
            )
        )
        messages.append((Severity.HINT, "Some features may not work correctly"))

    return TaskResult(
        name,
        success=True,
        changed=summary.installed > 0,
        messages=messages,
        details=summary,
    )
