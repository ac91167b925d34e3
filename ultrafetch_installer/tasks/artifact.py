# ultrafetch_installer/tasks/artifact.py

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ultrafetch_installer.core.command import run_command
from ultrafetch_installer.core.errors import ArtifactValidationError, DownloadError
from ultrafetch_installer.core.io import atomic_install, hash_file, temporary_sibling
from ultrafetch_installer.core.logger import LoggerProxy
from ultrafetch_installer.core.registry import task
from ultrafetch_installer.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)

SCRIPT_MARKER = b"#!"
ARTIFACT_MODE = 0o755


@dataclass
class FetchOutcome:
    path: Path
    digest: str | None
    changed: bool


def _troubleshooting(url: str) -> str:
    return "; ".join(
        [
            "verify internet connection",
            "check if GitHub is accessible: curl -I https://github.com",
            f"try manual download: curl -O {url}",
            "check firewall/proxy settings",
        ]
    )


def validate_artifact(path: Path) -> None:
    """Raise ArtifactValidationError unless `path` is a non-empty script."""
    if path.stat().st_size == 0:
        raise ArtifactValidationError("Downloaded file is empty")
    with path.open("rb") as f:
        first_line = f.readline()
    if not first_line.startswith(SCRIPT_MARKER):
        preview = first_line[:80].decode("utf-8", errors="replace").strip()
        raise ArtifactValidationError(
            "Downloaded file doesn't appear to be a valid script",
            hint=f"File contents: {preview}",
        )


def _is_current(destination: Path, digest: str | None) -> bool:
    return (
        digest is not None
        and hash_file(destination) == digest
        and os.access(destination, os.X_OK)
    )


def fetch(
    url: str,
    destination: Path,
    connect_timeout: float = 10,
    max_time: float = 30,
) -> FetchOutcome:
    """
    Download `url` and install it at `destination` as an executable.

    The download lands in a temp file next to `destination` and is only
    renamed into place once it validates. An identical, already executable
    destination is left untouched. The temp file never survives this call.
    """
    with temporary_sibling(destination) as tmp:
        result = run_command(
            [
                "curl",
                "-fsSL",
                "--connect-timeout",
                str(connect_timeout),
                "--max-time",
                str(max_time),
                url,
                "-o",
                str(tmp),
            ],
            check=True,
            timeout=max_time + 10,
        )
        if not result.success:
            detail = result.stderr or f"exit code {result.returncode}"
            raise DownloadError(f"Download failed: {detail}", hint=_troubleshooting(url))

        validate_artifact(tmp)

        digest = hash_file(tmp)
        if _is_current(destination, digest):
            log.info(f"{destination} is already up to date")
            return FetchOutcome(destination, digest, changed=False)

        atomic_install(tmp, destination, perms=ARTIFACT_MODE)

    return FetchOutcome(destination, digest, changed=True)


@task("UltraFetch Installation")
def install_artifact_task(ctx: TaskContext) -> TaskResult:
    config = ctx["config"]
    log.info("Downloading from GitHub...")
    log.info(f"Source: {config.artifact_url}")

    outcome = fetch(
        config.artifact_url,
        config.install_path,
        connect_timeout=config.download_connect_timeout,
        max_time=config.download_max_time,
    )

    if outcome.changed:
        message = "UltraFetch installed successfully"
    else:
        message = "UltraFetch already installed and up to date"
    return TaskResult(
        "UltraFetch Installation",
        success=True,
        changed=outcome.changed,
        messages=[(Severity.INFO, message), (Severity.INFO, f"Location: {outcome.path}")],
        details=outcome,
    )
