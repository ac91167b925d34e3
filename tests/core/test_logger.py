import logging
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from ultrafetch_installer.core.logger import LoggerProxy, log_file_path, setup_logging


def test_log_file_path_is_timestamped(tmp_path: Path):
    path = log_file_path(tmp_path, datetime(2025, 3, 4, 5, 6, 7))
    assert path == tmp_path / "ultrafetch_install_20250304_050607.log"


def test_setup_logging_writes_plain_text_file(tmp_path: Path):
    log_path = setup_logging(level_name="INFO", log_dir=tmp_path / "logs")
    assert log_path is not None and log_path.parent == tmp_path / "logs"

    log = LoggerProxy("ultrafetch.test")
    log.info("visible message")
    log.debug("debug detail")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_path.read_text()
    assert "visible message" in content
    # the file keeps DEBUG output even when the console is at INFO
    assert "debug detail" in content
    assert "[INFO    ]" in content


def test_setup_logging_console_level_follows_config():
    setup_logging(level_name="WARNING", log_dir=None)
    console = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
    assert len(console) == 1
    assert console[0].level == logging.WARNING


def test_setup_logging_verbose_forces_debug():
    setup_logging(level_name="ERROR", log_dir=None, verbose=True)
    console = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
    assert console[0].level == logging.DEBUG


def test_unwritable_log_dir_is_not_fatal(tmp_path: Path, capsys):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    assert setup_logging(log_dir=blocker / "logs") is None
    assert "Could not set up file logging" in capsys.readouterr().err


def test_logger_proxy_is_lazy():
    proxy = LoggerProxy("ultrafetch.lazy")
    assert proxy._logger is None
    assert proxy.name == "ultrafetch.lazy"
    assert proxy._logger is logging.getLogger("ultrafetch.lazy")
