from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv


load_dotenv(override=False)

ROOT_ENV = "DRIVEIMAGE_ROOT"
SETTINGS_ENV = "DRIVEIMAGE_SETTINGS"


def _is_frozen() -> bool:
    return getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS")


def _project_root() -> Path:
    env = os.getenv(ROOT_ENV)
    if env:
        return Path(env)
    # When frozen (PyInstaller onefile), resources are under sys._MEIPASS
    if _is_frozen():
        return Path(getattr(sys, "_MEIPASS"))  # type: ignore[arg-type]
    # In source layout, this file is under <root>/driveimage/core
    return Path(__file__).resolve().parents[2]


def _app_dir_writable_base() -> Path:
    """Writable base for runtime files (logs/settings).

    - Frozen: alongside the executable
    - Source: repository root, or ``DRIVEIMAGE_ROOT`` when set
    """
    if _is_frozen():
        return Path(sys.executable).resolve().parent
    env = os.getenv(ROOT_ENV)
    if env:
        return Path(env)
    return Path(__file__).resolve().parents[2]


def _config_dir() -> Path:
    return _project_root() / "driveimage" / "config"


def _work_dir() -> Path:
    # Always use a writable location outside of bundled resources
    return _app_dir_writable_base() / "driveimage" / "work"


def default_settings_path() -> Path:
    """Location of the persisted settings file."""

    env = os.getenv(SETTINGS_ENV)
    if env:
        return Path(env).expanduser()
    return _work_dir() / "settings.yaml"


def resolve_config_path(path: str | Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    # Support paths with or without leading 'driveimage/'
    parts = p.parts
    if parts and parts[0] == "driveimage":
        return _project_root() / p
    return _config_dir() / p
