"""
Centralized configuration for the activity engine.

Defaults live here. An optional YAML file (see paths.config_path) overrides
the defaults, and environment variables override the file.

    ACTIVITY_TIMEZONE             zone for naive dates and the default "now"
    ACTIVITY_LOG_LEVEL            DEBUG | INFO | WARNING | ERROR
    ACTIVITY_LOG_JSON             true | false (unset: JSON when stderr is not a TTY)
    ACTIVITY_SNAPSHOT_CACHE_SIZE  max memoized snapshots
    ACTIVITY_SOURCES_FILE         JSON file with tasks/shootings/meetings rows
    ACTIVITY_CORS_ORIGINS         "*" or comma-separated origins
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from activity_engine import paths

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_KEYS: dict[str, str] = {
    "timezone": "ACTIVITY_TIMEZONE",
    "log_level": "ACTIVITY_LOG_LEVEL",
    "log_json": "ACTIVITY_LOG_JSON",
    "snapshot_cache_size": "ACTIVITY_SNAPSHOT_CACHE_SIZE",
    "sources_file": "ACTIVITY_SOURCES_FILE",
    "cors_origins": "ACTIVITY_CORS_ORIGINS",
}


@dataclass(frozen=True)
class EngineSettings:
    """Resolved engine settings."""

    timezone: str = "UTC"
    log_level: str = "INFO"
    log_json: bool | None = None
    snapshot_cache_size: int = 32
    sources_file: str | None = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _parse_bool(key: str, value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("", "auto"):
        return None
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{key}: expected a boolean, got {value!r}")


def _coerce(name: str, value: Any) -> Any:
    """Validate and normalize one raw setting value."""
    if name == "timezone":
        try:
            ZoneInfo(str(value))
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"timezone: unknown zone {value!r}") from e
        return str(value)
    if name == "log_level":
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level: expected one of {LOG_LEVELS}, got {value!r}")
        return level
    if name == "log_json":
        return _parse_bool(name, value)
    if name == "snapshot_cache_size":
        try:
            size = int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"snapshot_cache_size: expected an integer, got {value!r}") from e
        if size < 1:
            raise ValueError("snapshot_cache_size: must be >= 1")
        return size
    if name == "sources_file":
        return str(value) if value else None
    if name == "cors_origins":
        if isinstance(value, str):
            return ["*"] if value.strip() == "*" else [o.strip() for o in value.split(",") if o.strip()]
        return [str(o) for o in value]
    raise ValueError(f"Unknown setting: {name}")


def load_yaml_config(path: Path | None = None) -> dict:
    """
    Load the optional engine YAML file.

    Returns an empty dict if the file doesn't exist.

    Raises:
        yaml.YAMLError if the file is invalid YAML.
        ValueError if the top level is not a mapping.
    """
    config_path = path or paths.config_path()
    if not config_path.exists():
        return {}

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping at the top level")
    return data


def load_settings(path: Path | None = None, environ: dict[str, str] | None = None) -> EngineSettings:
    """Build settings from defaults, the YAML file, then the environment."""
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(EngineSettings)}

    values: dict[str, Any] = {}
    for name, value in load_yaml_config(path).items():
        if name not in known:
            logger.warning(f"Ignoring unknown config key: {name}")
            continue
        values[name] = _coerce(name, value)

    for name, env_key in ENV_KEYS.items():
        if env_key in environ:
            values[name] = _coerce(name, environ[env_key])

    return EngineSettings(**values)


_settings: EngineSettings | None = None


def get_settings() -> EngineSettings:
    """Get or create the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() re-reads them."""
    global _settings
    _settings = None
