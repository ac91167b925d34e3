# ultrafetch_installer/tasks/preflight.py
"""
Pre-installation checks
=======================

* Python runtime is recent enough.
* Running as root (the artifact goes into a system bin directory).
* OS identity from /etc/os-release (informational).
* Free space on the install filesystem (warning only).

Only the first two are fatal; they raise PreconditionError before any
other work is attempted.
"""

from __future__ import annotations

import os
import shlex
import shutil
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ultrafetch_installer.core.errors import PreconditionError
from ultrafetch_installer.core.logger import LoggerProxy
from ultrafetch_installer.core.registry import task
from ultrafetch_installer.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)

MIN_PYTHON = (3, 10)
OS_RELEASE_PATH = Path("/etc/os-release")


@dataclass
class OsInfo:
    name: str
    version_id: str | None = None
    id: str | None = None

    def __str__(self) -> str:
        return f"{self.name} {self.version_id or 'unknown'}"


def check_python_version(version_info: tuple[int, ...] | None = None) -> str:
    version_info = tuple(version_info or sys.version_info)
    current = ".".join(str(part) for part in version_info[:3])
    if tuple(version_info[:2]) < MIN_PYTHON:
        required = ".".join(str(part) for part in MIN_PYTHON)
        raise PreconditionError(f"Python {required}+ is required (current: {current})")
    return current


def check_root(geteuid: Callable[[], int] | None = None) -> None:
    if (geteuid or os.geteuid)() != 0:
        raise PreconditionError(
            "Root privileges required",
            hint=f"Please run: sudo {shlex.join(sys.argv) or 'ultrafetch-install'}",
        )


def parse_os_release(text: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("'\"")]
        values[key.strip()] = parts[0] if parts else ""
    return values


def detect_os(os_release: Path | None = None) -> OsInfo | None:
    os_release = os_release or OS_RELEASE_PATH
    try:
        values = parse_os_release(os_release.read_text(encoding="utf-8"))
    except OSError as e:
        log.debug(f"Cannot read {os_release}: {e}")
        return None
    if "NAME" not in values:
        return None
    return OsInfo(name=values["NAME"], version_id=values.get("VERSION_ID"), id=values.get("ID"))


def _nearest_existing(path: Path) -> Path:
    for candidate in (path, *path.parents):
        if candidate.exists():
            return candidate
    return Path("/")


def check_disk_space(
    path: Path,
    min_free_bytes: int = 10 * 1024 * 1024,
    disk_usage: Callable | None = None,
) -> bool:
    """False (and a warning) if the filesystem holding `path` is short on space."""
    target = _nearest_existing(path)
    try:
        free = (disk_usage or shutil.disk_usage)(target).free
    except OSError as e:
        log.debug(f"Could not read free space for {target}: {e}")
        return True
    if free < min_free_bytes:
        log.warning(
            f"Low disk space detected on {target} "
            f"(less than {min_free_bytes // (1024 * 1024)}MB available)"
        )
        return False
    return True


@task("Pre-Installation Checks")
def preflight_task(ctx: TaskContext) -> TaskResult:
    config = ctx["config"]
    messages: list[tuple[Severity, str]] = []

    version = check_python_version()
    messages.append((Severity.INFO, f"Python version verified ({version})"))

    check_root()
    messages.append((Severity.INFO, "Running with root privileges"))

    os_info = detect_os()
    if os_info:
        messages.append((Severity.INFO, f"Detected: {os_info}"))
    else:
        messages.append((Severity.WARNING, "Could not detect OS version"))

    if not check_disk_space(config.install_path.parent, config.min_free_disk_bytes):
        messages.append((Severity.WARNING, "Low disk space; installation may fail"))

    return TaskResult("Pre-Installation Checks", True, False, messages, details=os_info)
