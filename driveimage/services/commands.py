"""Menu actions: insert images, setup, check settings.

Each action talks to the user through a ``UserInterface`` so the flows can run
from the CLI or from tests with scripted answers.
"""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

from driveimage.core.errors import DestinationOccupied, DriveImageError, SetupCanceled, UnknownSelectionState
from driveimage.core.locale import LocalizedMessage
from driveimage.core.logger import get_logger
from driveimage.core.settings import SETUP_COMPLETE_KEY, SettingsStore
from driveimage.services.gdrive.client import GoogleDriveClient, GoogleDriveFolder
from driveimage.services.placement.base import CellRange, ImageFolder, PlacementOptions, PlacementResult
from driveimage.services.placement.engine import PlacementEngine
from driveimage.services.placement.local import LocalFolder, is_local_folder_id
from driveimage.services.placement.selection import resolve_selection
from driveimage.services.placement.xlsx import XlsxWorkbook

LOGGER = get_logger()

SETUP_PROMPTS = (
    ("folderId", "promptFolderId"),
    ("fileExt", "promptFileExt"),
    ("selectionVertical", "promptSelectionVertical"),
    ("insertPosNext", "promptInsertPosNext"),
)

FolderFactory = Callable[..., ImageFolder]


class UserInterface(Protocol):
    def alert(self, message: str, title: str | None = None) -> None: ...

    def prompt(self, message: str) -> str | None:
        """Return the entered text, or ``None`` when the user cancels."""

    def confirm(self, message: str) -> bool: ...


def format_properties(properties: Mapping[str, Any]) -> str:
    lines = []
    for key, value in properties.items():
        shown = str(value).lower() if isinstance(value, bool) else value
        lines.append(f"{key}: {shown}\n")
    return "".join(lines)


def render_error(exc: BaseException, messages: LocalizedMessage) -> str:
    """Turn an exception into the message shown to the user."""

    if isinstance(exc, UnknownSelectionState):
        params = exc.params
        return messages.unknown_error(
            params.get("selectedRangeA1Notation", ""),
            params.get("optionsSelectionVertical", ""),
            params.get("rangeNumRows", ""),
            params.get("rangeNumColumns", ""),
        )
    if isinstance(exc, DriveImageError) and exc.message_key:
        return messages.render(exc.message_key, **exc.params)
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return messages.render("errorUnexpected", trace=trace)


def build_report(result: PlacementResult, messages: LocalizedMessage) -> str:
    text = messages.on_complete(round(result.fetch_seconds, 3), round(result.total_seconds, 3))
    for key, count in result.duplicates().items():
        text += messages.duplicate_line(key, count)
    return text


def open_folder(folder_id: str, *, drive_profile: str | None = None) -> ImageFolder:
    """Open a ``local:<path>`` directory or a Google Drive folder id (``root`` allowed)."""

    if is_local_folder_id(folder_id):
        return LocalFolder.from_folder_id(folder_id)
    client = GoogleDriveClient.from_profile(drive_profile)
    try:
        return GoogleDriveFolder.open(client, folder_id)
    except Exception:
        client.close()
        raise


def insert_image(
    store: SettingsStore,
    ui: UserInterface,
    messages: LocalizedMessage,
    *,
    workbook_path: str | Path,
    range_a1: str,
    sheet_name: str | None = None,
    output_path: str | Path | None = None,
    drive_profile: str | None = None,
    folder_factory: FolderFactory = open_folder,
) -> PlacementResult:
    """Insert images next to the selected cells and report the outcome."""

    settings = store.settings()
    options = PlacementOptions(
        file_ext=settings.file_ext,
        vertical=settings.selection_vertical,
        insert_after=settings.insert_pos_next,
    )
    workbook = XlsxWorkbook(workbook_path)
    sheet = workbook.sheet(sheet_name)
    selection = resolve_selection(sheet, CellRange.from_a1(range_a1), vertical=options.vertical)

    folder = folder_factory(settings.folder_id, drive_profile=drive_profile)
    try:
        engine = PlacementEngine(sheet, folder, options)
        try:
            result = engine.run_selection(selection)
        except DestinationOccupied as exc:
            LOGGER.warning("commands.insert_image aborted match_counts=%s", exc.match_counts)
            raise
    finally:
        close = getattr(folder, "close", None)
        if callable(close):
            close()

    saved = workbook.save(output_path)
    LOGGER.info(
        "commands.insert_image done sheet=%s range=%s inserted=%d missing=%s saved=%s",
        sheet.title,
        range_a1,
        result.inserted,
        ",".join(result.missing()) or "-",
        saved,
    )
    ui.alert(build_report(result, messages), title=messages.get("alertMessageOnCompleteTitle"))
    return result


def run_setup(store: SettingsStore, ui: UserInterface, messages: LocalizedMessage) -> bool:
    """Collect the four settings and persist them together.

    Returns False when the user declines to overwrite existing settings.

    Raises:
        SetupCanceled: A prompt was dismissed; nothing is written.
    """

    stored = store.load()
    current: Mapping[str, Any] = {}
    if store.is_setup_complete():
        question = messages.get("alertAlreadySetupMessage") + format_properties(stored)
        if not ui.confirm(question):
            LOGGER.info("commands.setup overwrite_declined")
            return False
        current = stored

    answers: dict[str, Any] = {}
    for key, prompt_key in SETUP_PROMPTS:
        text = messages.get(prompt_key)
        if current.get(key):
            text += messages.current_value(current[key])
        response = ui.prompt(text)
        if response is None:
            LOGGER.info("commands.setup canceled at=%s", key)
            raise SetupCanceled(f"Setup canceled at {key}")
        answers[key] = response.strip()

    answers[SETUP_COMPLETE_KEY] = True
    store.save(answers)
    ui.alert(messages.get("alertSetupComplete"))
    return True


def check_settings(store: SettingsStore, ui: UserInterface, messages: LocalizedMessage) -> str:
    listing = format_properties(store.load())
    ui.alert(listing, title=messages.get("alertCurrentSettingsTitle"))
    return listing


__all__ = [
    "UserInterface",
    "build_report",
    "check_settings",
    "format_properties",
    "insert_image",
    "open_folder",
    "render_error",
    "run_setup",
]
