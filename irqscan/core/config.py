"""Configuration loading with layered overrides."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from irqscan.core.details import DEFAULT_QUEUE_SIZE, DEFAULT_WORKERS

PROJECT_CONFIG = Path(".irqscan.yaml")


class ConfigError(Exception):
    """Invalid configuration value."""

    pass


@dataclass
class Settings:
    """Effective irqscan settings."""

    root: str = ""
    workers: int = DEFAULT_WORKERS
    queue_size: int = DEFAULT_QUEUE_SIZE
    log_dir: Path | None = None


def user_config_path() -> Path:
    """Path of the per-user config file."""
    return Path.home() / ".config" / "irqscan" / "config.yaml"


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file if it exists."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def get_config_value(key: str, paths: list[Path] | None = None) -> Any:
    """Get config value with project -> user -> None precedence."""
    if paths is None:
        paths = [PROJECT_CONFIG, user_config_path()]
    for path in paths:
        data = load_config_file(path)
        if key in data:
            return data[key]
    return None


def _positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if value < 1:
        raise ConfigError(f"{key} must be at least 1, got {value}")
    return value


def load_settings(paths: list[Path] | None = None, **overrides: Any) -> Settings:
    """
    Resolve settings from overrides, config files and defaults.

    Args:
        paths: Config files in precedence order (default: project, user)
        **overrides: Explicit values, e.g. from the command line; None
            values are ignored

    Returns:
        Effective Settings

    Raises:
        ConfigError: If a value has the wrong type or range
    """
    settings = Settings()
    for f in fields(Settings):
        value = overrides.get(f.name)
        if value is None:
            value = get_config_value(f.name, paths)
        if value is None:
            continue

        if f.name == "root":
            if not isinstance(value, str):
                raise ConfigError(f"root must be a string, got {value!r}")
        elif f.name in ("workers", "queue_size"):
            value = _positive_int(f.name, value)
        elif f.name == "log_dir":
            if not isinstance(value, (str, Path)):
                raise ConfigError(f"log_dir must be a path, got {value!r}")
            value = Path(value).expanduser()
        setattr(settings, f.name, value)
    return settings
