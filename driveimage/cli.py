"""Typer based command line entry points for driveimage."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from driveimage.core.locale import LocalizedMessage, resolve_locale
from driveimage.core.logger import get_logger, set_level
from driveimage.core.settings import SettingsStore
from driveimage.services import commands
from driveimage.services.gdrive import gdrive_app
from driveimage.services.placement.base import CellRange

app = typer.Typer(help="Insert images from a Drive folder next to spreadsheet cells.")
app.add_typer(gdrive_app, name="gdrive")

MENU_ITEMS = (
    ("menuInsertImage", "insert-image"),
    ("menuSetup", "setup"),
    ("menuCheckSettings", "check-settings"),
)


@dataclass(slots=True)
class AppContext:
    messages: LocalizedMessage
    store: SettingsStore


class TyperUi:
    """Terminal rendition of the add-on dialogs."""

    def alert(self, message: str, title: str | None = None) -> None:
        if title:
            typer.secho(title, bold=True)
        typer.echo(message.rstrip("\n"))

    def prompt(self, message: str) -> str | None:
        try:
            return typer.prompt(message, default="", show_default=False)
        except typer.Abort:
            return None

    def confirm(self, message: str) -> bool:
        try:
            return typer.confirm(message, default=False)
        except typer.Abort:
            return False


def _validate_range(value: str) -> str:
    try:
        CellRange.from_a1(value)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid A1 range: {value}") from exc
    return value


def _handle_error(exc: Exception, messages: LocalizedMessage) -> None:
    get_logger().error("driveimage command failed: %s", exc, exc_info=True)
    typer.secho(commands.render_error(exc, messages), fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (e.g. DEBUG/INFO/WARNING). Defaults to $DRIVEIMAGE_LOG_LEVEL, then INFO.",
    ),
    locale: Optional[str] = typer.Option(
        None,
        "--locale",
        help="UI language (en_US or ja_JP). Defaults to $DRIVEIMAGE_LOCALE, then en_US.",
    ),
    settings_path: Optional[Path] = typer.Option(
        None,
        "--settings",
        help="Settings file path. Defaults to $DRIVEIMAGE_SETTINGS or driveimage/work/settings.yaml.",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    if log_level:
        try:
            set_level(log_level)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc

    ctx.obj = AppContext(
        messages=LocalizedMessage(resolve_locale(locale)),
        store=SettingsStore(settings_path),
    )


@app.command("insert-image")
def cmd_insert_image(
    ctx: typer.Context,
    workbook: Path = typer.Option(..., "--workbook", help="Workbook (.xlsx) to insert the images into"),
    cell_range: str = typer.Option(
        ..., "--range", callback=_validate_range, help="Selected cells holding the file names, e.g. A2:A10"
    ),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Worksheet name (defaults to the active sheet)"),
    output: Optional[Path] = typer.Option(None, "--output", help="Save to this path instead of overwriting"),
    drive_profile: Optional[str] = typer.Option(None, "--drive-profile", help="gdrive profile in profiles.yaml"),
) -> None:
    """Insert images matching the selected cell values."""

    app_ctx: AppContext = ctx.obj
    try:
        commands.insert_image(
            app_ctx.store,
            TyperUi(),
            app_ctx.messages,
            workbook_path=workbook,
            range_a1=cell_range,
            sheet_name=sheet,
            output_path=output,
            drive_profile=drive_profile,
        )
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc, app_ctx.messages)


@app.command("setup")
def cmd_setup(ctx: typer.Context) -> None:
    """Set the folder, file extension, orientation and insert position."""

    app_ctx: AppContext = ctx.obj
    try:
        commands.run_setup(app_ctx.store, TyperUi(), app_ctx.messages)
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc, app_ctx.messages)


@app.command("check-settings")
def cmd_check_settings(ctx: typer.Context) -> None:
    """Show the stored settings."""

    app_ctx: AppContext = ctx.obj
    try:
        commands.check_settings(app_ctx.store, TyperUi(), app_ctx.messages)
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc, app_ctx.messages)


@app.command("menu")
def cmd_menu(ctx: typer.Context) -> None:
    """List the available actions in the selected language."""

    messages: LocalizedMessage = ctx.obj.messages
    typer.secho(messages.get("menuTitle"), bold=True)
    for label_key, command in MENU_ITEMS:
        typer.echo(f"  {messages.get(label_key):24} driveimage {command}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
