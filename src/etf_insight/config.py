"""
Configuration loading and management for ETF Insight.

This module handles loading server settings from an optional YAML file
and environment variables, validation of those settings, and logging
setup.
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from etf_insight.models import ServerConfig


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Environment variable -> config field. Later entries override earlier ones.
ENV_OVERRIDES = [
    ("ETF_INSIGHT_HOST", "host"),
    ("PORT", "port"),
    ("ETF_INSIGHT_PORT", "port"),
    ("ETF_INSIGHT_UPLOAD_DIR", "upload_dir"),
    ("ETF_INSIGHT_MAX_UPLOAD_BYTES", "max_upload_bytes"),
    ("ETF_INSIGHT_LOG_LEVEL", "log_level"),
]

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""
    pass


def load_server_config(
    config_path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """
    Load server configuration with layered overrides.

    Sources are applied in this order (later sources override earlier):
    1. Built-in defaults
    2. YAML file at config_path, if given
    3. Environment variables (see ENV_OVERRIDES)

    Args:
        config_path: Optional path to a YAML configuration file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated ServerConfig

    Raises:
        ConfigurationError: If the file is missing or invalid, or a
                            value fails validation
    """
    raw: dict[str, Any] = {}

    if config_path is not None:
        raw.update(_load_yaml(Path(config_path)))

    env = os.environ if environ is None else environ
    for var, field_name in ENV_OVERRIDES:
        if env.get(var):
            raw[field_name] = env[var]

    return _parse_server_config(raw)


def _load_yaml(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML configuration file into a dictionary.

    Raises:
        ConfigurationError: If the file is missing, unreadable,
                            or not a mapping
    """
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {config_path}"
        )
    return loaded


def _parse_server_config(raw: dict[str, Any]) -> ServerConfig:
    """
    Parse and validate a raw configuration dictionary.

    Args:
        raw: Settings from YAML and the environment

    Returns:
        Validated ServerConfig; absent fields keep their defaults

    Raises:
        ConfigurationError: If any value is invalid
    """
    defaults = ServerConfig()

    host = str(raw.get("host", defaults.host))
    if not host:
        raise ConfigurationError("host cannot be empty")

    port = _parse_int(raw.get("port", defaults.port), "port")
    if not 0 < port < 65536:
        raise ConfigurationError(f"port must be between 1 and 65535, got {port}")

    upload_dir = str(raw.get("upload_dir", defaults.upload_dir))
    if not upload_dir:
        raise ConfigurationError("upload_dir cannot be empty")

    max_upload_bytes = _parse_int(
        raw.get("max_upload_bytes", defaults.max_upload_bytes),
        "max_upload_bytes",
    )
    if max_upload_bytes <= 0:
        raise ConfigurationError(
            f"max_upload_bytes must be positive, got {max_upload_bytes}"
        )

    log_level = str(raw.get("log_level", defaults.log_level)).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigurationError(f"Invalid log_level: {log_level}")

    return ServerConfig(
        host=host,
        port=port,
        upload_dir=upload_dir,
        max_upload_bytes=max_upload_bytes,
        log_level=log_level,
    )


def _parse_int(value: Any, field_name: str) -> int:
    """
    Parse an integer setting.

    Raises:
        ConfigurationError: If the value is not an integer
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid integer value for {field_name}: {value}")

    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid integer value for {field_name}: {value}")


def write_config(config: ServerConfig, output_path: str | Path) -> None:
    """
    Write a ServerConfig to a YAML file.

    Args:
        config: The configuration to write
        output_path: Path to write the YAML file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = {
        "host": config.host,
        "port": config.port,
        "upload_dir": config.upload_dir,
        "max_upload_bytes": config.max_upload_bytes,
        "log_level": config.log_level,
    }

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the server and CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
