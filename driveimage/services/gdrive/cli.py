"""Typer CLI entry points for inspecting Google Drive folders."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from driveimage.core.logger import get_logger

from .client import GoogleDriveClient

LOGGER = get_logger()

app = typer.Typer(name="gdrive", help="Inspect Google Drive folders used as image sources.")


def _resolve_client(profile: Optional[str]) -> GoogleDriveClient:
    return GoogleDriveClient.from_profile(profile)


def _handle_error(exc: Exception) -> None:
    LOGGER.error("gdrive operation failed: %s", exc, exc_info=True)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("find")
def cmd_find(
    name: str = typer.Option(..., "--name", help="Exact file name, extension included"),
    folder: str = typer.Option("root", "--folder", help="Folder id ('root' for My Drive)"),
    profile: Optional[str] = typer.Option(None, "--profile", help="gdrive profile name"),
) -> None:
    """List every file with the given name in a folder, in API order."""

    try:
        client = _resolve_client(profile)
    except Exception as exc:
        _handle_error(exc)
    try:
        items = client.list_by_name(folder, name)
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc)
    else:
        if not items:
            typer.echo("<empty>")
        for item in items:
            typer.echo(f"{item.id:40} {item.name:40} {item.mime_type or '-'}")
    finally:
        client.close()


@app.command("download")
def cmd_download(
    item_id: str = typer.Option(..., "--id", help="File identifier"),
    out: Path = typer.Option(..., "--out", help="Destination path or directory"),
    profile: Optional[str] = typer.Option(None, "--profile", help="gdrive profile name"),
) -> None:
    """Download a file from Google Drive."""

    try:
        client = _resolve_client(profile)
    except Exception as exc:
        _handle_error(exc)
    try:
        written = client.download_file(item_id, str(out))
        typer.echo(written)
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc)
    finally:
        client.close()


__all__ = ["app"]
