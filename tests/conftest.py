import logging
from pathlib import Path

import pytest

from ultrafetch_installer.core.command import CommandResult
from ultrafetch_installer.core.config import InstallerConfig
from ultrafetch_installer.tasks.dependencies import DEPENDENCY_SPEC

SCRIPT = b"#!/bin/sh\necho 'UltraFetch 3.1'\n"

PACKAGE_MANAGERS = {"apt-get", "apt", "dnf", "yum", "pacman", "zypper"}

# Every module that shells out through run_command
RUN_COMMAND_USERS = (
    "ultrafetch_installer.tasks.network",
    "ultrafetch_installer.tasks.packages",
    "ultrafetch_installer.tasks.sensors",
    "ultrafetch_installer.tasks.artifact",
    "ultrafetch_installer.tasks.verify",
    "ultrafetch_installer.main",
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging swaps the root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(returncode=0, stdout=stdout, stderr="", success=True)


def fail(returncode: int = 1, stderr: str = "") -> CommandResult:
    return CommandResult(returncode=returncode, stdout="", stderr=stderr, success=False)


@pytest.fixture
def config(tmp_path: Path) -> InstallerConfig:
    return InstallerConfig(
        artifact_url="https://example.invalid/ultrafetch",
        install_path=tmp_path / "bin" / "ultrafetch",
        log_dir=None,
    )


class FakeHost:
    """
    Simulated machine: which commands exist, whether the network answers,
    and what the artifact URL serves. Records every command it is asked to run.
    """

    def __init__(
        self,
        install_path: Path,
        commands=(),
        online: bool = True,
        artifact: bytes = SCRIPT,
        command_name: str = "ultrafetch",
    ):
        self.install_path = install_path
        self.commands = set(commands)
        self.online = online
        self.artifact = artifact
        self.command_name = command_name
        self.calls: list[list[str]] = []
        self._package_to_command = {pkg: cmd for cmd, pkg in DEPENDENCY_SPEC.items()}

    def which(self, name: str):
        if name in self.commands:
            return f"/usr/bin/{name}"
        if name == self.command_name and self.install_path.exists():
            return str(self.install_path)
        return None

    def package_manager_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[0] in PACKAGE_MANAGERS]

    def run(self, cmd, **kwargs) -> CommandResult:
        cmd = list(cmd)
        self.calls.append(cmd)
        prog = cmd[0]

        if prog == "curl":
            if "curl" not in self.commands:
                return fail(-1, "Command not found: curl")
            if not self.online:
                return fail(6, "curl: (6) Could not resolve host")
            out = cmd[cmd.index("-o") + 1]
            if out != "/dev/null":
                Path(out).write_bytes(self.artifact)
            return ok()

        if prog == "ping":
            return ok() if self.online else fail(1)

        if prog in PACKAGE_MANAGERS:
            if prog not in self.commands:
                return fail(-1, f"Command not found: {prog}")
            if "install" in cmd or "-S" in cmd:
                command = self._package_to_command.get(cmd[-1])
                if command:
                    self.commands.add(command)
            return ok()

        if prog == "sensors":
            if "sensors" not in self.commands:
                return fail(-1)
            return ok("coretemp-isa-0000\nCore 0:  +42.0°C")

        if prog == str(self.install_path):
            return ok("UltraFetch 3.1") if "--version" in cmd else ok()

        return ok()

    def attach(self, monkeypatch) -> "FakeHost":
        monkeypatch.setattr("shutil.which", self.which)
        for module in RUN_COMMAND_USERS:
            monkeypatch.setattr(f"{module}.run_command", self.run)
        monkeypatch.setattr(
            "ultrafetch_installer.tasks.network._dns_probe", lambda host: self.online
        )
        return self


@pytest.fixture
def make_host(monkeypatch, config):
    """Factory: build a FakeHost for `config.install_path` and patch it in."""

    def _make(**kwargs) -> FakeHost:
        kwargs.setdefault("command_name", config.command_name)
        return FakeHost(config.install_path, **kwargs).attach(monkeypatch)

    return _make
