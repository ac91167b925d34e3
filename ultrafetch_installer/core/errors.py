# ultrafetch_installer/core/errors.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class InstallerError(Exception):
    """Base error for installer steps. `hint` is shown to the user as a next step."""

    message: str
    hint: str | None = None

    def __str__(self) -> str:
        return self.message


class PreconditionError(InstallerError):
    """Wrong privilege level or runtime too old; nothing has been attempted yet."""


class ConnectivityError(InstallerError):
    pass


class DependencyInstallError(InstallerError):
    pass


class SensorConfigError(InstallerError):
    pass


class DownloadError(InstallerError):
    pass


class ArtifactValidationError(DownloadError):
    """The download completed but does not look like an installable script."""


class VerificationError(InstallerError):
    pass
