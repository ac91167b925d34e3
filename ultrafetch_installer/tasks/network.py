# ultrafetch_installer/tasks/network.py

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from enum import Enum

from ultrafetch_installer.core.command import command_exists, run_command
from ultrafetch_installer.core.config import InstallerConfig
from ultrafetch_installer.core.errors import ConnectivityError
from ultrafetch_installer.core.logger import LoggerProxy
from ultrafetch_installer.core.registry import task
from ultrafetch_installer.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)

POSSIBLE_CAUSES = (
    "Network firewall blocking outbound connections",
    "Proxy configuration required",
    "DNS resolution issues",
    "No internet access",
)


class ConnectivityStatus(Enum):
    VERIFIED = "verified"
    AMBIGUOUS = "ambiguous"  # name resolution works, nothing else answered
    UNVERIFIED = "unverified"


@dataclass
class ConnectivityReport:
    status: ConnectivityStatus
    probe: str | None = None
    attempted: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is not ConnectivityStatus.UNVERIFIED


def _https_probe(url: str, config: InstallerConfig) -> bool:
    if not command_exists("curl"):
        log.debug(f"curl not available; skipping probe of {url}")
        return False
    result = run_command(
        [
            "curl",
            "-fsSL",
            "--connect-timeout",
            str(config.probe_connect_timeout),
            "--max-time",
            str(config.probe_max_time),
            url,
            "-o",
            "/dev/null",
        ],
        check=False,
        # curl enforces max-time itself; this only guards against a wedged process
        timeout=config.probe_max_time + 5,
    )
    return result.success


def _icmp_probe(target: str, config: InstallerConfig) -> bool:
    if not command_exists("ping"):
        log.debug("ping not available; skipping ICMP probe")
        return False
    result = run_command(
        ["ping", "-c", "1", "-W", str(config.icmp_timeout), target],
        check=False,
        timeout=config.icmp_timeout + 5,
    )
    return result.success


def _dns_probe(host: str) -> bool:
    try:
        socket.getaddrinfo(host, 443, proto=socket.IPPROTO_TCP)
    except (OSError, UnicodeError) as e:
        log.debug(f"DNS lookup of {host} failed: {e}")
        return False
    return True


def check_internet(config: InstallerConfig) -> ConnectivityReport:
    """
    Try each reachability probe in order until one answers.

    HTTPS or ICMP success means VERIFIED; only DNS succeeding means AMBIGUOUS.
    Never raises: when nothing answers the report is UNVERIFIED and the
    caller decides whether to continue.
    """
    report = ConnectivityReport(ConnectivityStatus.UNVERIFIED)

    for url in config.https_probes:
        probe = f"HTTPS {url}"
        report.attempted.append(probe)
        if _https_probe(url, config):
            report.status, report.probe = ConnectivityStatus.VERIFIED, probe
            return report

    probe = f"ICMP {config.icmp_target}"
    report.attempted.append(probe)
    if _icmp_probe(config.icmp_target, config):
        report.status, report.probe = ConnectivityStatus.VERIFIED, probe
        return report

    probe = f"DNS {config.dns_probe_host}"
    report.attempted.append(probe)
    if _dns_probe(config.dns_probe_host):
        report.status, report.probe = ConnectivityStatus.AMBIGUOUS, probe

    return report


@task("Network Connectivity Check")
def connectivity_task(ctx: TaskContext) -> TaskResult:
    name = "Network Connectivity Check"
    config = ctx["config"]
    messages: list[tuple[Severity, str]] = []

    log.info("Testing network connectivity...")
    report = check_internet(config)

    if report.status is ConnectivityStatus.VERIFIED:
        messages.append((Severity.INFO, f"Internet connection verified ({report.probe})"))
        return TaskResult(name, True, False, messages, details=report)

    if report.status is ConnectivityStatus.AMBIGUOUS:
        messages.append((Severity.WARNING, "DNS works but HTTP/HTTPS connectivity unclear"))
        messages.append((Severity.INFO, "Attempting to proceed anyway..."))
        return TaskResult(name, True, False, messages, details=report)

    log.error("Cannot verify internet connectivity")
    log.warning("Possible causes:")
    for cause in POSSIBLE_CAUSES:
        log.warning(f"   • {cause}")

    if config.strict_connectivity:
        raise ConnectivityError(
            "Cannot verify internet connectivity (strict mode)",
            hint=f"Probes attempted: {', '.join(report.attempted)}",
        )

    if not ctx["confirm"]("Continue anyway?", default=False):
        raise ConnectivityError("Installation cancelled by user")

    messages.append((Severity.WARNING, "Proceeding without connectivity verification..."))
    return TaskResult(name, True, False, messages, details=report)
