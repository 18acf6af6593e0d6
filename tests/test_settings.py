from __future__ import annotations

from pathlib import Path

import pytest

from driveimage.core.errors import ConfigError, SettingsIncomplete
from driveimage.core.settings import Settings, SettingsStore, to_boolean

COMPLETE = {
    "folderId": "root",
    "fileExt": "png",
    "selectionVertical": "true",
    "insertPosNext": "false",
}


@pytest.mark.parametrize(
    "value, expected",
    [("true", True), ("TRUE", True), (" True ", True), ("false", False), ("yes", False), ("", False), (True, True)],
)
def test_to_boolean(value, expected) -> None:
    assert to_boolean(value) is expected


def test_settings_from_properties() -> None:
    settings = Settings.from_properties(COMPLETE)
    assert settings.folder_id == "root"
    assert settings.file_ext == "png"
    assert settings.selection_vertical is True
    assert settings.insert_pos_next is False


@pytest.mark.parametrize("missing", ["folderId", "fileExt", "selectionVertical", "insertPosNext"])
def test_missing_value_is_incomplete(missing: str) -> None:
    properties = {**COMPLETE, missing: "  "}
    with pytest.raises(SettingsIncomplete) as info:
        Settings.from_properties(properties)
    assert info.value.params["missing"] == [missing]


def test_absent_file_is_empty(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.yaml")
    assert store.load() == {}
    assert store.is_setup_complete() is False
    with pytest.raises(SettingsIncomplete):
        store.settings()


def test_save_merges_and_persists(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.yaml"
    store = SettingsStore(path)
    store.save({**COMPLETE, "setupComplete": True})
    store.save({"fileExt": "jpg"})

    reloaded = SettingsStore(path)
    assert reloaded.is_setup_complete()
    assert reloaded.settings().file_ext == "jpg"
    assert reloaded.load()["folderId"] == "root"
    assert [p.name for p in path.parent.iterdir()] == ["settings.yaml"]


def test_non_mapping_file_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        SettingsStore(path).load()


def test_default_path_follows_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DRIVEIMAGE_SETTINGS", str(tmp_path / "custom.yaml"))
    assert SettingsStore().path == tmp_path / "custom.yaml"
