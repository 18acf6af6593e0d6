"""Configuration helpers for driveimage runtime files.

Holds the bundled ``profiles.yaml`` with drive connection profiles and the
YAML loader shared by the services that read it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from driveimage.core.errors import ConfigError
from driveimage.core.profiles import resolve_config_path


CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_PROFILES_PATH = CONFIG_DIR / "profiles.yaml"


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Read a YAML mapping, raising ``ConfigError`` for missing or malformed files."""

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise ConfigError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {cfg_path}")
    return data


def load_profile_section(section: str, *, path: str | Path | None = None) -> Dict[str, Mapping[str, Any]]:
    """Return the named profiles under ``section`` of profiles.yaml."""

    cfg_path = resolve_config_path(path) if path else DEFAULT_PROFILES_PATH
    data = load_yaml(cfg_path)
    raw = data.get(section)
    if not isinstance(raw, Mapping):
        raise ConfigError(f"profiles.yaml missing '{section}' section")
    profiles: Dict[str, Mapping[str, Any]] = {}
    for key, value in raw.items():
        if isinstance(value, Mapping):
            profiles[str(key)] = value
    if not profiles:
        raise ConfigError(f"No {section} profiles defined in profiles.yaml")
    return profiles


__all__ = ["CONFIG_DIR", "DEFAULT_PROFILES_PATH", "load_yaml", "load_profile_section"]
