"""Configuration loading for animate-upgrade (.animate-upgrade.yml)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import OutputMode

CONFIG_FILENAME = ".animate-upgrade.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class UpgradeConfig:
    """Represents the settings defined in .animate-upgrade.yml."""

    root: Path
    mode: OutputMode = OutputMode.COMMONJS
    namespace: str = "animate"
    import_source: str = "pixi-animate"
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> UpgradeConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return UpgradeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = UpgradeConfig(root=root)

    mode = _as_str(data.get("mode"))
    if mode:
        try:
            config.mode = OutputMode.parse(mode)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    namespace = _as_str(data.get("namespace"))
    if namespace:
        if not namespace.isidentifier():
            raise ConfigError(f"namespace must be a plain identifier, got '{namespace}'")
        config.namespace = namespace

    import_source = _as_str(data.get("import_source"))
    if import_source:
        config.import_source = import_source

    log_file = _as_str(data.get("log_file"))
    if log_file:
        config.log_file = root / log_file

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None
