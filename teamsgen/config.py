"""Configuration loading for teamsgen (.teamsgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".teamsgen.yml"


@dataclass
class HostConfig:
    """Where and how host classes are discovered."""

    glob: str = "src/app/**/*.ts"
    marker: str = "BotDeclaration"
    argument_index: int = 2


@dataclass
class ExtensionConfig:
    """Decorator and module used to register message extensions on a host."""

    marker: str = "MessageExtensionDeclaration"
    module: str = "express-msteams-host"


@dataclass
class TeamsGenConfig:
    """Represents the settings defined in .teamsgen.yml."""

    root: Path
    manifest_path: str = "src/manifest/manifest.json"
    env_file: str = ".env"
    client_script: str = "src/app/scripts/client.ts"
    options_file: str = ".yo-rc.json"
    host: HostConfig = field(default_factory=HostConfig)
    extension: ExtensionConfig = field(default_factory=ExtensionConfig)


def load_config(config_path: Path) -> TeamsGenConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TeamsGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = TeamsGenConfig(root=root)
    for key in ("manifest_path", "env_file", "client_script", "options_file"):
        value = _as_str(data.get(key))
        if value:
            setattr(config, key, value)

    host_data = _as_dict(data.get("host"))
    if host_data:
        config.host.glob = _as_str(host_data.get("glob")) or config.host.glob
        config.host.marker = _as_str(host_data.get("marker")) or config.host.marker
        index = _as_int(host_data.get("argument_index"))
        if index is not None:
            if index < 0:
                raise ConfigError("host.argument_index must not be negative")
            config.host.argument_index = index

    extension_data = _as_dict(data.get("extension"))
    if extension_data:
        config.extension.marker = _as_str(extension_data.get("marker")) or config.extension.marker
        config.extension.module = _as_str(extension_data.get("module")) or config.extension.module

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
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
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


__all__ = [
    "ConfigError",
    "CONFIG_FILENAME",
    "ExtensionConfig",
    "HostConfig",
    "TeamsGenConfig",
    "load_config",
]
