"""
Engine configuration loader (mky.yaml).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

# Single source of truth for configuration file layout.
CONFIG_FILE = "mky.yaml"
DEFAULT_EXTENSION = ".html"
DEFAULT_NAMESPACE = "mky"
DEFAULT_ROOTS = {
    "layout": "layouts",
    "view": "views",
    "component": "components",
}
# mky.yaml uses plural keys for directory roots
_ROOT_KEYS = {"layouts": "layout", "views": "view", "components": "component"}

_yaml = YAML(typ="safe")


def config_path(root: Path) -> Path:
    """Path to the configuration file <root>/mky.yaml."""
    return (root / CONFIG_FILE).resolve()


def cache_enabled_by_env(default: bool = True) -> bool:
    """MKY_CACHE=0/false/no/off disables the disk cache."""
    env = os.environ.get("MKY_CACHE", None)
    if env is None:
        return default
    return env.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass
class EngineConfig:
    """
    Resolved engine settings.

    Paths are absolute; relative paths from mky.yaml are anchored
    at the directory holding the file.
    """
    roots: Dict[str, Path] = field(default_factory=dict)
    extension: str = DEFAULT_EXTENSION
    namespace: str = DEFAULT_NAMESPACE
    cache_dir: Optional[Path] = None
    strict: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Path) -> "EngineConfig":
        """Builds the config from a parsed YAML mapping."""
        unknown = set(data) - set(_ROOT_KEYS) - {"extension", "namespace", "cache", "strict"}
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")

        roots: Dict[str, Path] = {}
        for key, role in _ROOT_KEYS.items():
            raw = data.get(key, DEFAULT_ROOTS[role])
            if not isinstance(raw, str) or not raw.strip():
                raise ConfigError(f"'{key}' must be a non-empty path string")
            roots[role] = (base / raw).resolve()

        extension = str(data.get("extension", DEFAULT_EXTENSION))
        if not extension.startswith("."):
            extension = "." + extension

        cache_raw = data.get("cache", None)
        cache_dir = (base / str(cache_raw)).resolve() if cache_raw else None

        strict = data.get("strict", True)
        if not isinstance(strict, bool):
            raise ConfigError("'strict' must be a boolean")

        return cls(
            roots=roots,
            extension=extension,
            namespace=str(data.get("namespace", DEFAULT_NAMESPACE)),
            cache_dir=cache_dir,
            strict=strict,
        )


def _read_yaml_map(path: Path) -> dict:
    """Reads a YAML file and returns a mapping."""
    if not path.is_file():
        return {}
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def load_config(root: Path) -> EngineConfig:
    """
    Loads <root>/mky.yaml; defaults apply when the file is absent.

    Args:
        root: Project root

    Returns:
        Resolved EngineConfig
    """
    path = config_path(root)
    return EngineConfig.from_dict(_read_yaml_map(path), path.parent)


def load_data_file(path: Path) -> Dict[str, Any]:
    """Loads bind data from a YAML or JSON file (JSON is valid YAML)."""
    if not path.is_file():
        raise ConfigError(f"Data file not found: {path}")
    return _read_yaml_map(path)


__all__ = [
    "CONFIG_FILE",
    "EngineConfig",
    "config_path",
    "cache_enabled_by_env",
    "load_config",
    "load_data_file",
]
