"""Configuration loading from CLI args, env vars, and optional YAML file."""

import os
import logging
from dataclasses import dataclass, fields

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates", "index.html")
OUTPUT_FORMATS = ("html", "json")


class ConfigError(Exception):
    """Raised when the YAML config file exists but cannot be used."""


@dataclass(frozen=True)
class Config:
    scope_marker: str = "matrix_sdk::http_client"
    operation: str = "sync_once"
    connection_field: str = "conn_id"
    request_id_prefix: str = "REQ-"
    template_path: str = DEFAULT_TEMPLATE
    log_level: str = "INFO"
    output_format: str = "html"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(cli_args, yaml_data: dict) -> Config:
    """Build Config from CLI args, env vars, and parsed YAML data.

    Precedence is CLI flag, then environment variable, then YAML, then default.
    """
    known = {f.name for f in fields(Config)}
    for key in yaml_data:
        if key not in known:
            logger.warning("Ignoring unknown config key %r", key)
    values = {k: v for k, v in yaml_data.items() if k in known}

    env_log_level = os.environ.get("TRACE_WATERFALL_LOG_LEVEL")
    if env_log_level:
        values["log_level"] = env_log_level
    env_template = os.environ.get("TRACE_WATERFALL_TEMPLATE")
    if env_template:
        values["template_path"] = env_template

    if getattr(cli_args, "verbose", False):
        values["log_level"] = "DEBUG"
    output_format = getattr(cli_args, "output_format", None)
    if output_format:
        values["output_format"] = output_format

    values = {k: str(v) for k, v in values.items()}
    values["log_level"] = values.get("log_level", Config.log_level).upper()
    if not isinstance(logging.getLevelName(values["log_level"]), int):
        raise ConfigError(f"Unknown log_level {values['log_level']!r}")
    if values.get("output_format", Config.output_format) not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {values['output_format']!r}"
        )
    return Config(**values)
