# ultrafetch_installer/tasks/sensors.py
"""
Hardware sensor configuration (lm-sensors).

Everything here is best effort: a machine without readable temperature
sensors still gets a working install, so no failure in this module ends
the run.
"""

from __future__ import annotations

from ultrafetch_installer.core.command import command_exists, run_command
from ultrafetch_installer.core.errors import SensorConfigError
from ultrafetch_installer.core.logger import LoggerProxy
from ultrafetch_installer.core.registry import task
from ultrafetch_installer.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)

TEMPERATURE_MARKERS = ("°C", "°F")
# sensors-detect asks a dozen or so questions; an empty line takes the default
AUTO_ANSWERS = "\n" * 100
MODULE_RELOAD_COMMANDS = (
    ["systemctl", "restart", "kmod"],
    ["service", "kmod", "restart"],
)
MANUAL_HINT = "You can run 'sudo sensors-detect' later if needed"


def sensors_report_temperatures() -> bool:
    result = run_command(["sensors"], check=False)
    return result.success and any(marker in result.stdout for marker in TEMPERATURE_MARKERS)


def run_sensors_detect(timeout: float = 60) -> None:
    result = run_command(
        ["sensors-detect"], check=True, timeout=timeout, input_text=AUTO_ANSWERS
    )
    if result.timed_out:
        raise SensorConfigError(f"Sensor detection timed out after {timeout:g}s")
    if not result.success:
        raise SensorConfigError(f"Sensor detection failed (exit code {result.returncode})")


def reload_kernel_modules() -> bool:
    """Restart the module loader with whichever service manager answers first."""
    for cmd in MODULE_RELOAD_COMMANDS:
        if run_command(cmd, check=False).success:
            return True
    return False


def configure_sensors(timeout: float = 60) -> tuple[bool, list[tuple[Severity, str]]]:
    """
    Returns (changed, messages). Never raises for sensor problems.
    """
    messages: list[tuple[Severity, str]] = []

    if not command_exists("sensors"):
        messages.append((Severity.WARNING, "lm-sensors not installed, skipping configuration"))
        return False, messages

    if sensors_report_temperatures():
        messages.append((Severity.INFO, "Sensors already configured and working"))
        return False, messages

    log.info(f"Detecting hardware sensors (this may take up to {timeout:g} seconds)...")
    log.warning("You may see kernel module warnings - this is normal")
    try:
        run_sensors_detect(timeout)
    except SensorConfigError as exc:
        messages.append((Severity.WARNING, f"{exc} (non-critical)"))
        messages.append((Severity.HINT, MANUAL_HINT))
        return False, messages

    messages.append((Severity.INFO, "Sensor detection completed"))
    if reload_kernel_modules():
        messages.append((Severity.INFO, "Sensor modules loaded"))
    else:
        messages.append((Severity.HINT, "Run 'sudo sensors-detect' manually if sensors don't work"))
    return True, messages


@task("Hardware Sensor Configuration")
def configure_sensors_task(ctx: TaskContext) -> TaskResult:
    name = "Hardware Sensor Configuration"
    config = ctx["config"]
    if not config.sensors_enabled:
        return TaskResult(name, True, False, [(Severity.INFO, "Sensor setup disabled in config")])

    changed, messages = configure_sensors(config.sensor_detect_timeout)
    return TaskResult(name, True, changed, messages)
