"""Custom exceptions used across driveimage.

User-facing errors carry a ``message_key`` into the localization table and the
placeholder values needed to render it.
"""

from __future__ import annotations

from typing import Any, Mapping


class DriveImageError(Exception):
    """Base error for the application."""

    message_key: str | None = None

    def __init__(self, message: str = "", *, params: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.params: dict[str, Any] = dict(params or {})


class ConfigError(DriveImageError):
    """Configuration related error."""


class SettingsIncomplete(ConfigError):
    """One of the required persisted settings is missing."""

    message_key = "errorInitialSettingNotComplete"


class SetupCanceled(DriveImageError):
    """The user dismissed a setup prompt."""

    message_key = "errorCanceled"


class SelectionError(DriveImageError):
    """Base class for selection validation failures."""


class InvalidSelectionShape(SelectionError):
    """Selection spans more than one column (vertical) or row (horizontal)."""

    def __init__(self, message: str = "", *, vertical: bool, params: Mapping[str, Any] | None = None) -> None:
        super().__init__(message, params=params)
        self.vertical = vertical

    @property
    def message_key(self) -> str:  # type: ignore[override]
        if self.vertical:
            return "errorMoreThanOneColumnSelected"
        return "errorMoreThanOneRowSelected"


class EmptySelection(SelectionError):
    """The selected cells are all blank."""

    message_key = "errorEmptyCellsSelected"


class UnknownSelectionState(SelectionError):
    """Selection shape not covered by any validation rule (invariant failure)."""

    message_key = "errorUnknownError"


class DestinationOccupied(SelectionError):
    """The range that would receive the images already holds content."""

    message_key = "errorExistingContentInInsertCellRange"

    def __init__(
        self,
        message: str = "",
        *,
        match_counts: Mapping[str, int] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message, params=params)
        self.match_counts: dict[str, int] = dict(match_counts or {})


class DestinationOutOfBounds(SelectionError):
    """The insert offset would move the destination off the sheet."""

    message_key = "errorDestinationOutOfBounds"


class PlatformFault(DriveImageError):
    """Failure reported by the drive or spreadsheet backend."""


__all__ = [
    "DriveImageError",
    "ConfigError",
    "SettingsIncomplete",
    "SetupCanceled",
    "SelectionError",
    "InvalidSelectionShape",
    "EmptySelection",
    "UnknownSelectionState",
    "DestinationOccupied",
    "DestinationOutOfBounds",
    "PlatformFault",
]
