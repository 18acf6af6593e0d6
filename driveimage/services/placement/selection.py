"""Selection validation and destination computation."""

from __future__ import annotations

from typing import Any

from driveimage.core.errors import (
    DestinationOccupied,
    DestinationOutOfBounds,
    EmptySelection,
    InvalidSelectionShape,
    UnknownSelectionState,
)
from driveimage.core.logger import get_logger

from .base import CellRange, PlacementOptions, Selection, SheetSurface

LOGGER = get_logger()


def cell_to_key(value: Any) -> str:
    """Render a cell value as the file base name it is looked up by."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve_selection(sheet: SheetSurface, cell_range: CellRange, *, vertical: bool) -> Selection:
    """Validate the selection shape and read the lookup keys in order.

    Raises:
        InvalidSelectionShape: More than one column (vertical) or row (horizontal).
        EmptySelection: The selection is blank.
        UnknownSelectionState: No rule matched; should be unreachable.
    """

    rows, columns = cell_range.num_rows, cell_range.num_columns
    if (vertical and columns == 1) or (not vertical and rows == 1):
        values = sheet.values(cell_range)
        # row-major flattening gives top-to-bottom or left-to-right order
        keys = [cell_to_key(value) for row in values for value in row]
        return Selection(range=cell_range, vertical=vertical, keys=keys)
    if vertical and columns > 1:
        raise InvalidSelectionShape(
            f"More than one column selected: {cell_range.a1}", vertical=True
        )
    if not vertical and rows > 1:
        raise InvalidSelectionShape(
            f"More than one row selected: {cell_range.a1}", vertical=False
        )
    if sheet.is_blank(cell_range):
        raise EmptySelection(f"Empty cells: {cell_range.a1}")
    raise UnknownSelectionState(
        f"Unknown selection state: {cell_range.a1}",
        params={
            "selectedRangeA1Notation": cell_range.a1,
            "optionsSelectionVertical": str(vertical).lower(),
            "rangeNumRows": rows,
            "rangeNumColumns": columns,
        },
    )


def destination_range(selection: Selection, options: PlacementOptions) -> CellRange:
    """Shift the selection one row/column across the selection axis."""

    if selection.vertical:
        return selection.range.offset(0, options.offset)
    return selection.range.offset(options.offset, 0)


def check_destination(
    sheet: SheetSurface,
    destination: CellRange,
    *,
    match_counts: dict[str, int] | None = None,
) -> None:
    """Fail unless every destination cell exists and is blank."""

    if destination.row < 1 or destination.column < 1:
        raise DestinationOutOfBounds(
            f"Destination outside the sheet: row={destination.row} column={destination.column}",
            params={"destinationA1Notation": f"R{destination.row}C{destination.column}"},
        )
    if not sheet.is_blank(destination):
        LOGGER.warning("placement.selection destination_occupied range=%s", destination.a1)
        raise DestinationOccupied(
            f"Existing content in insert range {destination.a1}",
            match_counts=match_counts,
        )


__all__ = ["cell_to_key", "resolve_selection", "destination_range", "check_destination"]
