#!/usr/bin/env python3
"""
UltraFetch Installer
====================

CLI entry point that wires up:
* Logging & configuration
* Task registration and the fixed run order (PIPELINE)
* The install pipeline, completion summary and the optional first run

Takes no options; configuration comes from the JSON file named by
ULTRAFETCH_CONFIG_FILE (schema defaults otherwise).
"""

from __future__ import annotations

# ── Standard library ────────────────────────────────────────────────────────
import signal
from pathlib import Path

# ── Third-party ─────────────────────────────────────────────────────────────
import typer

# ── Local imports ───────────────────────────────────────────────────────────
from ultrafetch_installer import __version__
from ultrafetch_installer.core import config as config_loader
from ultrafetch_installer.core.command import run_command
from ultrafetch_installer.core.config import InstallerConfig
from ultrafetch_installer.core.errors import InstallerError
from ultrafetch_installer.core.logger import LoggerProxy, setup_logging
from ultrafetch_installer.core.prompt import ConfirmationProvider, TerminalConfirmer
from ultrafetch_installer.core.registry import get_task_registry
from ultrafetch_installer.core.task import Severity, TaskContext, TaskResult

# Register pipeline steps with the task registry
import ultrafetch_installer.tasks.preflight  # noqa: F401
import ultrafetch_installer.tasks.network  # noqa: F401
import ultrafetch_installer.tasks.dependencies  # noqa: F401
import ultrafetch_installer.tasks.sensors  # noqa: F401
import ultrafetch_installer.tasks.artifact  # noqa: F401
import ultrafetch_installer.tasks.verify  # noqa: F401

# ── Exit codes ──────────────────────────────────────────────────────────────
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130

# ── Run order ───────────────────────────────────────────────────────────────
# Tasks run in this order regardless of the order they registered in
PIPELINE: tuple[str, ...] = (
    "Pre-Installation Checks",
    "Network Connectivity Check",
    "Package Repository Update",
    "Dependency Installation",
    "Hardware Sensor Configuration",
    "UltraFetch Installation",
    "Installation Verification",
)

# ── Typer CLI app ───────────────────────────────────────────────────────────
app = typer.Typer(
    help="UltraFetch Installer - system information tool installer.",
    add_completion=False,
)


# Small helper to route Severity -> logger method (supports HINT -> .info)
def _log_with_severity(log: LoggerProxy, sev: Severity, msg: str) -> None:
    getattr(log, sev.log_method())(msg)


def _log_error(log: LoggerProxy, exc: InstallerError) -> None:
    log.error(str(exc))
    if exc.hint:
        log.info(exc.hint)


def run_pipeline(ctx: TaskContext, log: LoggerProxy) -> tuple[bool, list[TaskResult]]:
    """
    Run each task named in PIPELINE once, in that order. The first failed
    task stops the run. KeyboardInterrupt always propagates to the caller.
    """
    registry = get_task_registry()
    missing = [name for name in PIPELINE if name not in registry]
    if missing:
        raise RuntimeError(f"Pipeline tasks not registered: {', '.join(missing)}")

    summary: list[TaskResult] = []

    for task_name in PIPELINE:
        handler = registry[task_name]
        log.info("")
        log.info(f"── {task_name} ──")
        try:
            result = handler(ctx)
        except KeyboardInterrupt:
            raise
        except InstallerError as exc:
            _log_error(log, exc)
            result = TaskResult(
                name=task_name,
                success=False,
                messages=[(Severity.ERROR, str(exc))],
            )
        except Exception as exc:
            log.exception("Task %s crashed: %s", task_name, exc)
            result = TaskResult(
                name=task_name,
                success=False,
                messages=[(Severity.ERROR, str(exc))],
            )
        else:
            for lvl, msg in result.messages:
                _log_with_severity(log, lvl, msg)

        summary.append(result)

        if not result.success:
            log.error("Task %s FAILED - aborting further execution.", task_name)
            return False, summary

        if result.changed:
            log.debug("Task %s made changes", task_name)

    return True, summary


# ── Helpers ────────────────────────────────────────────────────────────────
def _print_summary(results: list[TaskResult], ok: bool, log: LoggerProxy) -> None:
    """Pretty-print a one line summary per task."""
    log.info("================================================================")
    for res in results:
        status = "OK  " if res.success else "FAIL"
        changed = " (changed)" if res.changed else ""
        log.info("* %-30s : %s%s", res.name, status, changed)
    log.info("================================================================")
    log.info("Overall result: %s", "SUCCESS" if ok else "FAILURE")


def _print_completion(config: InstallerConfig, log_path: Path | None, log: LoggerProxy) -> None:
    log.info("")
    log.info("✨ Installation Complete! ✨")
    log.info(f"{config.command_name} is ready to use!")
    log.info("Quick Start:")
    log.info(f"   $ {config.command_name}          # Display system information")
    log.info(f"   $ {config.command_name} --help   # Show available options")
    log.info("Resources & Support:")
    log.info("   Website   https://infinityforge.tech")
    log.info("   Docs      https://docs.infinityforge.tech")
    if log_path:
        log.info(f"   Log File  {log_path}")


def offer_quick_run(
    config: InstallerConfig, confirm: ConfirmationProvider, log: LoggerProxy
) -> bool:
    """Ask to run the freshly installed tool. Returns True if it was started."""
    if not confirm(f"Would you like to run {config.command_name} now?", default=True):
        return False
    log.info(f"Running {config.command_name}...")
    result = run_command([str(config.install_path)], check=False, capture=False)
    if not result.success:
        log.warning(f"{config.command_name} encountered an error (exit code {result.returncode})")
    return True


def _raise_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt


def install(
    config: InstallerConfig, confirm: ConfirmationProvider, log_path: Path | None = None
) -> int:
    """Run the whole install and return the process exit code."""
    log = LoggerProxy(__name__)
    log.info(f"UltraFetch Installer v{__version__}")
    if log_path:
        log.info(f"Installation log: {log_path}")

    ctx: TaskContext = {"config": config, "confirm": confirm}

    try:
        ok, summary = run_pipeline(ctx, log)
        _print_summary(summary, ok, log)
        if not ok:
            log.error(f"Installation failed with exit code: {EXIT_FAILED}")
            if log_path:
                log.info(f"Check the log file for details: {log_path}")
            return EXIT_FAILED

        _print_completion(config, log_path, log)
        offer_quick_run(config, confirm, log)
    except KeyboardInterrupt:
        log.error("Installation interrupted")
        if log_path:
            log.info(f"Check the log file for details: {log_path}")
        return EXIT_INTERRUPTED

    log.info("Thank you for installing UltraFetch!")
    return EXIT_OK


# ── CLI command ─────────────────────────────────────────────────────────────
@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    add_help_option=False,
)
def main(ctx: typer.Context) -> None:
    """
    Install UltraFetch and its dependencies. Arguments are ignored.
    """
    config_data = config_loader.load_config(config_loader.config_path_from_env())
    config = InstallerConfig.from_dict(config_data)

    log_path = setup_logging(
        level_name=config.log_level,
        log_dir=config.log_dir,
        log_format=config.log_format,
        date_format=config.date_format,
    )
    if ctx.args:
        LoggerProxy(__name__).debug(f"Ignoring arguments: {ctx.args}")

    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        code = install(config, TerminalConfirmer(), log_path)
    finally:
        signal.signal(signal.SIGTERM, previous)

    raise typer.Exit(code=code)


# ── Main guard ──────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app()
