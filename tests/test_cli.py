"""CLI integration tests for the menu actions."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from openpyxl import Workbook, load_workbook
from typer.testing import CliRunner

from conftest import make_png
from driveimage import cli
from driveimage.services.gdrive import cli as gdrive_cli
from driveimage.services.gdrive.models import DriveFile


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    return tmp_path / "settings.yaml"


def _invoke(runner: CliRunner, settings_path: Path, *args: str, input: str | None = None):
    return runner.invoke(cli.app, ["--settings", str(settings_path), *args], input=input)


def test_menu_in_japanese(cli_runner: CliRunner, settings_path: Path) -> None:
    result = _invoke(cli_runner, settings_path, "--locale", "ja_JP", "menu")
    assert result.exit_code == 0, result.output
    assert "Googleドライブから画像挿入" in result.output
    assert "driveimage setup" in result.output


def test_setup_then_check_settings(cli_runner: CliRunner, settings_path: Path) -> None:
    result = _invoke(cli_runner, settings_path, "setup", input="root\npng\ntrue\nfalse\n")
    assert result.exit_code == 0, result.output
    assert "Complete: setup of script properties" in result.output

    stored = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    assert stored["folderId"] == "root"
    assert stored["setupComplete"] is True

    result = _invoke(cli_runner, settings_path, "check-settings")
    assert result.exit_code == 0, result.output
    assert "Current Settings" in result.output
    assert "insertPosNext: false" in result.output


def test_setup_interrupted_reports_cancel(cli_runner: CliRunner, settings_path: Path) -> None:
    result = _invoke(cli_runner, settings_path, "setup", input="root\n")
    assert result.exit_code == 1
    assert "Canceled." in result.output
    assert not settings_path.exists()


def test_insert_image_without_setup_fails(cli_runner: CliRunner, settings_path: Path, tmp_path: Path) -> None:
    book = tmp_path / "book.xlsx"
    Workbook().save(book)
    result = _invoke(cli_runner, settings_path, "insert-image", "--workbook", str(book), "--range", "A1")
    assert result.exit_code == 1
    assert "Initial settings is not complete." in result.output


def test_insert_image_rejects_bad_range(cli_runner: CliRunner, settings_path: Path, tmp_path: Path) -> None:
    result = _invoke(cli_runner, settings_path, "insert-image", "--workbook", str(tmp_path / "x.xlsx"), "--range", "??")
    assert result.exit_code == 2


def test_insert_image_from_local_folder(cli_runner: CliRunner, settings_path: Path, tmp_path: Path) -> None:
    images = tmp_path / "images"
    images.mkdir()
    (images / "101.png").write_bytes(make_png(30, 30))
    settings_path.write_text(
        yaml.safe_dump(
            {
                "folderId": f"local:{images}",
                "fileExt": "png",
                "selectionVertical": "true",
                "insertPosNext": "false",
                "setupComplete": True,
            }
        ),
        encoding="utf-8",
    )
    wb = Workbook()
    wb.active.title = "Items"
    wb.active["C4"] = 101
    book = tmp_path / "book.xlsx"
    wb.save(book)
    output = tmp_path / "out.xlsx"

    result = _invoke(
        cli_runner,
        settings_path,
        "insert-image",
        "--workbook",
        str(book),
        "--range",
        "C4",
        "--sheet",
        "Items",
        "--output",
        str(output),
    )

    assert result.exit_code == 0, result.output
    assert "Image Insert Complete" in result.output
    images_placed = load_workbook(output)["Items"]._images
    assert len(images_placed) == 1
    assert images_placed[0].anchor._from.col == 1


class _StubDriveClient:
    def __init__(self) -> None:
        self.closed = False

    def list_by_name(self, folder: str, name: str):
        assert (folder, name) == ("folder-1", "cat.png")
        return [DriveFile(id="id-1", name="cat.png", mime_type="image/png")]

    def close(self) -> None:
        self.closed = True


def test_gdrive_find_lists_matches(
    cli_runner: CliRunner, settings_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    stub = _StubDriveClient()
    monkeypatch.setattr(gdrive_cli, "_resolve_client", lambda profile: stub)

    result = _invoke(cli_runner, settings_path, "gdrive", "find", "--name", "cat.png", "--folder", "folder-1")

    assert result.exit_code == 0, result.output
    assert "id-1" in result.output
    assert stub.closed


def test_gdrive_find_without_credentials(
    cli_runner: CliRunner, settings_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    for key in ("GDRIVE_ACCESS_TOKEN", "GDRIVE_CLIENT_ID", "GDRIVE_CLIENT_SECRET", "GDRIVE_REFRESH_TOKEN"):
        monkeypatch.delenv(key, raising=False)
    result = _invoke(cli_runner, settings_path, "gdrive", "find", "--name", "cat.png")
    assert result.exit_code == 1
    assert "credentials not configured" in result.output
