# ultrafetch_installer/core/config.py

from __future__ import annotations

import copy
import json
import os
import tempfile
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft7Validator

from ultrafetch_installer.core.logger import LoggerProxy

# Load our JSON Schema as a Python dict
SCHEMA: dict[str, Any] = json.loads(
    resources.files("ultrafetch_installer")
    .joinpath("schema", "config.v1.schema.json")
    .read_text(encoding="utf-8")
)

log = LoggerProxy(__name__)

CONFIG_ENV_VAR = "ULTRAFETCH_CONFIG_FILE"
DEFAULT_CONFIG_PATH = Path("/etc/ultrafetch/installer.json")
DEFAULT_ARTIFACT_URL = (
    "https://raw.githubusercontent.com/infinityForge-labs/ultrafetch/refs/heads/main/scripts/ultrafetch"
)

# grab the un-hooked "properties" validator
_default_properties = Draft7Validator.VALIDATORS["properties"]


def _set_defaults(validator, properties, instance, schema):
    """
    jsonschema hook: whenever a property has a 'default', insert a copy of it,
    then delegate to the original Draft7 `properties` validator.
    """
    if not isinstance(instance, dict):
        return
    for prop, subschema in properties.items():
        if "default" in subschema:
            instance.setdefault(prop, copy.deepcopy(subschema["default"]))

    yield from _default_properties(validator, properties, instance, schema)


_DefaultingValidator = jsonschema.validators.extend(
    Draft7Validator,
    {"properties": _set_defaults},
)


def _deep_update(base: dict, updates: dict) -> None:
    """
    Recursively update base with updates (mutates base).
    """
    for k, v in updates.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_update(base[k], v)
        else:
            base[k] = v


def schema_defaults() -> dict[str, Any]:
    """Config dict holding nothing but the schema's own defaults."""
    config: dict[str, Any] = {}
    for _ in _DefaultingValidator(SCHEMA).iter_errors(config):
        pass
    return config


def config_path_from_env() -> Path:
    return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH).expanduser()


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """
    Loads and validates configuration against our JSON Schema.
    Fills in any missing properties with the schema's own default values.
    A missing or broken file is never fatal: the schema defaults are used instead.
    """
    log.debug(f"Attempting to load configuration from: {config_path}")

    config = schema_defaults()
    final_validator = Draft7Validator(SCHEMA)

    if not config_path.is_file():
        log.debug(f"No config at {config_path}; using schema defaults.")
        return config

    try:
        user_config = json.loads(config_path.read_text(encoding="utf-8"))
        final_validator.validate(user_config)
    except (OSError, json.JSONDecodeError) as e:
        log.error(f"Error reading configuration {config_path}: {e}")
        log.warning("Using schema defaults only.")
        return config
    except jsonschema.ValidationError as e:
        log.error(f"Configuration validation error: {e.message}")
        log.warning("Falling back to schema defaults.")
        return config

    # Merge user values onto our defaults
    _deep_update(config, user_config)
    final_validator.validate(config)

    log.debug("Configuration loaded and validated.")
    return config


def default_log_dir() -> Path:
    """Where run logs go unless configured: the system temp dir, so TMPDIR applies."""
    return Path(tempfile.gettempdir())


@dataclass(frozen=True)
class InstallerConfig:
    """Everything a run needs to know, built once at startup."""

    artifact_url: str = DEFAULT_ARTIFACT_URL
    install_path: Path = Path("/usr/local/bin/ultrafetch")
    command_name: str = "ultrafetch"
    download_connect_timeout: float = 10
    download_max_time: float = 30
    version_timeout: float = 10

    strict_connectivity: bool = False
    https_probes: tuple[str, ...] = (
        "https://raw.githubusercontent.com",
        "https://www.google.com",
        "https://1.1.1.1",
    )
    icmp_target: str = "8.8.8.8"
    icmp_timeout: int = 3
    dns_probe_host: str = "github.com"
    probe_connect_timeout: float = 5
    probe_max_time: float = 10

    sensors_enabled: bool = True
    sensor_detect_timeout: float = 60

    min_free_disk_bytes: int = 10 * 1024 * 1024
    log_level: str = "INFO"
    log_dir: Path | None = field(default_factory=default_log_dir)
    log_format: str = "%(asctime)s [%(levelname)-8s] %(name)-22s: %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "InstallerConfig":
        """Build from a schema-validated (defaults-filled) config dict."""
        behavior = config["script_behavior"]
        artifact = config["artifact"]
        network = config["network"]
        sensors = config["sensors"]

        log_dir = None
        if behavior["log_to_file"]:
            configured = behavior["log_file_directory"]
            log_dir = Path(configured).expanduser() if configured else default_log_dir()

        return cls(
            artifact_url=artifact["url"],
            install_path=Path(artifact["install_path"]),
            command_name=artifact["command_name"],
            download_connect_timeout=artifact["connect_timeout"],
            download_max_time=artifact["max_time"],
            version_timeout=artifact["version_timeout"],
            strict_connectivity=network["strict"],
            https_probes=tuple(network["https_probes"]),
            icmp_target=network["icmp_target"],
            icmp_timeout=network["icmp_timeout"],
            dns_probe_host=network["dns_probe_host"],
            probe_connect_timeout=network["probe_connect_timeout"],
            probe_max_time=network["probe_max_time"],
            sensors_enabled=sensors["enable"],
            sensor_detect_timeout=sensors["detect_timeout"],
            min_free_disk_bytes=behavior["min_free_disk_mib"] * 1024 * 1024,
            log_level=behavior["log_level_default"],
            log_dir=log_dir,
            log_format=behavior["log_format"],
            date_format=behavior["date_format"],
        )
