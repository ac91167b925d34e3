# ultrafetch_installer/core/task.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypedDict

if TYPE_CHECKING:
    from ultrafetch_installer.core.config import InstallerConfig
    from ultrafetch_installer.core.prompt import ConfirmationProvider
    from ultrafetch_installer.tasks.packages import PackageManager


class _TaskContextBase(TypedDict):
    config: InstallerConfig
    confirm: ConfirmationProvider


class TaskContext(_TaskContextBase, total=False):
    """Runtime context passed to every task function."""

    # Filled in by the first task that needs it; one detection per run
    package_manager: PackageManager


class Severity(Enum):
    """
    Represents the severity levels for logging or messaging.

    Provides a mapping between severity levels and their corresponding
    logger method names.
    """

    DEBUG = "debug"
    HINT = "hint"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def log_method(self) -> str:
        """
        Determine the appropriate logger method name based on the severity level.

        Returns:
            str: The logger method name corresponding to the severity level.
        """
        if self in (Severity.INFO, Severity.HINT):
            return "info"
        return self.value


@dataclass
class TaskResult:
    name: str
    success: bool
    changed: bool = False
    messages: list[tuple[Severity, str]] = field(default_factory=list)
    details: Any | None = None  # Flexible detail container for task-specific metadata

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{status}] {self.name}: {self.messages[-1][1] if self.messages else 'No message'}"
