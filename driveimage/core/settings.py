"""Persisted user settings (folder, extension, orientation, insert direction)."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigError, SettingsIncomplete
from .logger import get_logger
from .profiles import default_settings_path

LOGGER = get_logger()

REQUIRED_KEYS = ("folderId", "fileExt", "selectionVertical", "insertPosNext")
SETUP_COMPLETE_KEY = "setupComplete"


def to_boolean(value: Any) -> bool:
    """Convert stringified booleans; only ``"true"`` (any case) is truthy."""

    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


class Settings(BaseModel):
    """Validated view of the stored settings."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    folder_id: str = Field(alias="folderId")
    file_ext: str = Field(alias="fileExt")
    selection_vertical: bool = Field(alias="selectionVertical")
    insert_pos_next: bool = Field(alias="insertPosNext")

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "Settings":
        """Build settings from the raw store mapping.

        Raises:
            SettingsIncomplete: If any of the four required values is missing or blank.
        """

        missing = [
            key for key in REQUIRED_KEYS if properties.get(key) is None or not str(properties[key]).strip()
        ]
        if missing:
            raise SettingsIncomplete(f"Missing settings: {', '.join(missing)}", params={"missing": missing})
        return cls(
            folderId=str(properties["folderId"]).strip(),
            fileExt=str(properties["fileExt"]).strip(),
            selectionVertical=to_boolean(properties["selectionVertical"]),
            insertPosNext=to_boolean(properties["insertPosNext"]),
        )


class SettingsStore:
    """Flat string-keyed YAML mapping that survives across invocations."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else default_settings_path()

    def load(self) -> Dict[str, Any]:
        """Read every stored property; an absent file means nothing is configured."""

        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file must contain a mapping: {self.path}")
        return {str(key): value for key, value in data.items()}

    def is_setup_complete(self) -> bool:
        return to_boolean(self.load().get(SETUP_COMPLETE_KEY, False))

    def settings(self) -> Settings:
        return Settings.from_properties(self.load())

    def save(self, properties: Mapping[str, Any]) -> None:
        """Write all properties at once, replacing the file atomically."""

        payload = dict(self.load())
        payload.update(properties)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".settings-", suffix=".yaml", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                yaml.safe_dump(payload, handle, allow_unicode=True, sort_keys=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOGGER.info("settings.store saved path=%s keys=%s", self.path, ",".join(payload.keys()))


__all__ = ["Settings", "SettingsStore", "REQUIRED_KEYS", "SETUP_COMPLETE_KEY", "to_boolean"]
