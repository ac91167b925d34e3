# ultrafetch_installer/tasks/packages.py
"""
Package manager drivers
=======================

One driver class per supported package manager. Each carries its fixed
command table (refresh / install arguments, environment, accepted exit codes)
so the pipeline never branches on the manager's name.

Detection probes executables in a fixed priority order; the first one found
on PATH wins.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence
from enum import Enum
from typing import ClassVar

from ultrafetch_installer.core.command import CommandResult, run_command
from ultrafetch_installer.core.errors import DependencyInstallError
from ultrafetch_installer.core.logger import LoggerProxy
from ultrafetch_installer.core.task import TaskContext

log = LoggerProxy(__name__)

Which = Callable[[str], "str | None"]


class PackageManagerKind(Enum):
    APT = "apt"
    DNF = "dnf"
    YUM = "yum"
    PACMAN = "pacman"
    ZYPPER = "zypper"
    UNKNOWN = "unknown"


# (executable, kind) in probe priority order
PROBE_ORDER: tuple[tuple[str, PackageManagerKind], ...] = (
    ("apt-get", PackageManagerKind.APT),
    ("apt", PackageManagerKind.APT),
    ("dnf", PackageManagerKind.DNF),
    ("yum", PackageManagerKind.YUM),
    ("pacman", PackageManagerKind.PACMAN),
    ("zypper", PackageManagerKind.ZYPPER),
)


class PackageManager:
    """Base driver. Subclasses only fill in the command table."""

    kind: ClassVar[PackageManagerKind] = PackageManagerKind.UNKNOWN
    executables: ClassVar[Sequence[str]] = ()
    refresh_args: ClassVar[Sequence[str]] = ()
    install_args: ClassVar[Sequence[str]] = ()
    env: ClassVar[dict[str, str]] = {}
    refresh_ok_codes: ClassVar[Sequence[int]] = (0,)

    def __init__(self, executable: str | None = None):
        self.executable = executable or (self.executables[0] if self.executables else None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(executable={self.executable!r})"

    @property
    def name(self) -> str:
        return self.executable or self.kind.value

    def is_present(self, which: Which | None = None) -> bool:
        which = which or shutil.which
        return self.executable is not None and which(self.executable) is not None

    def refresh_command(self) -> list[str]:
        return [self.name, *self.refresh_args]

    def install_command(self, package: str) -> list[str]:
        return [self.name, *self.install_args, package]

    def refresh(self) -> CommandResult:
        """Refresh package lists. Exit codes in `refresh_ok_codes` count as success."""
        return run_command(
            self.refresh_command(),
            check=True,
            env=self.env or None,
            ok_codes=self.refresh_ok_codes,
        )

    def install(self, package: str) -> CommandResult:
        """Install one package non-interactively; raises DependencyInstallError on failure."""
        result = run_command(self.install_command(package), check=True, env=self.env or None)
        if not result.success:
            raise DependencyInstallError(
                f"{self.name} could not install {package} (exit code {result.returncode})",
                hint=result.stderr.splitlines()[-1] if result.stderr else None,
            )
        return result


class AptManager(PackageManager):
    kind = PackageManagerKind.APT
    executables = ("apt-get", "apt")
    refresh_args = ("update", "-qq")
    install_args = ("install", "-qq", "-y")
    env = {"DEBIAN_FRONTEND": "noninteractive"}


class DnfManager(PackageManager):
    kind = PackageManagerKind.DNF
    executables = ("dnf",)
    refresh_args = ("check-update", "-q")
    install_args = ("install", "-q", "-y")
    # check-update exits 100 when updates are available
    refresh_ok_codes = (0, 100)


class YumManager(DnfManager):
    kind = PackageManagerKind.YUM
    executables = ("yum",)


class PacmanManager(PackageManager):
    kind = PackageManagerKind.PACMAN
    executables = ("pacman",)
    refresh_args = ("-Sy", "--noconfirm")
    install_args = ("-S", "--noconfirm", "--quiet")


class ZypperManager(PackageManager):
    kind = PackageManagerKind.ZYPPER
    executables = ("zypper",)
    refresh_args = ("refresh",)
    install_args = ("install", "-y")


class UnknownManager(PackageManager):
    """Stand-in when no supported package manager exists; never runs anything."""

    def is_present(self, which: Which | None = None) -> bool:
        return False

    def refresh(self) -> CommandResult:
        raise DependencyInstallError(
            "Unsupported package manager, skipping update",
            hint="Install curl, bc, util-linux, pciutils and lm-sensors manually.",
        )

    def install(self, package: str) -> CommandResult:
        raise DependencyInstallError(f"{package}: unsupported package manager")


DRIVERS: dict[PackageManagerKind, type[PackageManager]] = {
    PackageManagerKind.APT: AptManager,
    PackageManagerKind.DNF: DnfManager,
    PackageManagerKind.YUM: YumManager,
    PackageManagerKind.PACMAN: PacmanManager,
    PackageManagerKind.ZYPPER: ZypperManager,
    PackageManagerKind.UNKNOWN: UnknownManager,
}


def detect_package_manager(which: Which | None = None) -> PackageManagerKind:
    """Return the kind of the first package manager found, in PROBE_ORDER."""
    which = which or shutil.which
    for executable, kind in PROBE_ORDER:
        if which(executable) is not None:
            log.debug(f"Found package manager executable: {executable}")
            return kind
    return PackageManagerKind.UNKNOWN


def get_package_manager(
    kind: PackageManagerKind, which: Which | None = None
) -> PackageManager:
    """Driver for `kind`, bound to the first of its executables present on PATH."""
    which = which or shutil.which
    driver_cls = DRIVERS[kind]
    for executable in driver_cls.executables:
        if which(executable) is not None:
            return driver_cls(executable)
    return driver_cls()


def package_manager_for(ctx: TaskContext) -> PackageManager:
    """Detect once per run and cache the driver on the task context."""
    if "package_manager" not in ctx:
        kind = detect_package_manager()
        ctx["package_manager"] = get_package_manager(kind)
        log.info(f"Package manager: {ctx['package_manager'].name}")
    return ctx["package_manager"]
