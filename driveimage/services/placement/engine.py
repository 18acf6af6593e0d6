"""Match lookup keys to folder files and place the images into the sheet."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Sequence

from driveimage.core.logger import get_logger

from .base import (
    CellGeometry,
    CellRange,
    FileMatch,
    ImageBlob,
    ImageFolder,
    PlacementOptions,
    PlacementResult,
    Selection,
    SheetSurface,
)
from .selection import check_destination, destination_range, resolve_selection

LOGGER = get_logger()


def fit_scale(cell: CellGeometry, image_height: float, image_width: float) -> float:
    """Uniform scale so the image fits inside the cell on both axes."""

    return min(cell.height_px / image_height, cell.width_px / image_width)


def centering_offset(cell_width: float, resized_width: float) -> int:
    return math.floor((cell_width - resized_width) / 2)


def match_key(folder: ImageFolder, key: str, file_ext: str) -> FileMatch:
    """Count every entry named ``key.ext``; the first one enumerated supplies the blob.

    Which duplicate comes first is decided by the folder's enumeration order.
    """

    match = FileMatch(key=key)
    for entry in folder.find_by_name(f"{key}.{file_ext}"):
        match.match_count += 1
        if match.blob is None:
            match.blob = ImageBlob(name=key, data=folder.fetch(entry))
    return match


class PlacementEngine:
    """Insert one fit-scaled, horizontally centred image per lookup key."""

    def __init__(
        self,
        sheet: SheetSurface,
        folder: ImageFolder,
        options: PlacementOptions,
        *,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._sheet = sheet
        self._folder = folder
        self._options = options
        self._clock = clock
        self._logger = logger or LOGGER

    def run(self, cell_range: CellRange) -> PlacementResult:
        """Resolve the selection, match files, validate the destination and insert."""

        selection = resolve_selection(self._sheet, cell_range, vertical=self._options.vertical)
        return self.run_selection(selection)

    def run_selection(self, selection: Selection) -> PlacementResult:
        """Match files for an already validated selection, then insert.

        Match counts are complete before the destination check, so a
        ``DestinationOccupied`` failure still carries them.
        """

        start = self._clock()
        matches = self.match_all(selection.keys)
        result = PlacementResult()
        for match in matches:
            result.match_counts[match.key] = match.match_count
        result.fetch_seconds = self._clock() - start
        self._logger.info(
            "placement.engine matched keys=%d found=%d elapsed=%.3fs",
            len(matches),
            sum(1 for match in matches if match.blob is not None),
            result.fetch_seconds,
        )

        destination = destination_range(selection, self._options)
        check_destination(self._sheet, destination, match_counts=result.match_counts)

        result.inserted = self.place_all(selection, destination, matches)
        result.total_seconds = self._clock() - start
        self._logger.info(
            "placement.engine finished inserted=%d duplicates=%d elapsed=%.3fs",
            result.inserted,
            len(result.duplicates()),
            result.total_seconds,
        )
        return result

    def match_all(self, keys: Sequence[str]) -> list[FileMatch]:
        matches: list[FileMatch] = []
        for key in keys:
            match = match_key(self._folder, key, self._options.file_ext)
            if match.match_count == 0:
                self._logger.warning("placement.engine no_match key=%s ext=%s", key, self._options.file_ext)
            elif match.match_count > 1:
                self._logger.warning("placement.engine duplicates key=%s count=%d", key, match.match_count)
            matches.append(match)
        return matches

    def place_all(self, selection: Selection, destination: CellRange, matches: Sequence[FileMatch]) -> int:
        inserted = 0
        for index, match in enumerate(matches):
            if match.blob is None:
                continue
            if selection.vertical:
                row, column = destination.row + index, destination.column
            else:
                row, column = destination.row, destination.column + index
            self.place(match.blob, row, column)
            inserted += 1
        return inserted

    def place(self, blob: ImageBlob, row: int, column: int) -> None:
        image = self._sheet.insert_image(blob, column, row)
        image_height, image_width = image.height, image.width
        cell = CellGeometry(
            height_px=self._sheet.row_height_px(row),
            width_px=self._sheet.column_width_px(column),
        )
        scale = fit_scale(cell, image_height, image_width)
        resized_height, resized_width = image_height * scale, image_width * scale
        image.resize(resized_height, resized_width)
        offset_x = centering_offset(cell.width_px, resized_width)
        image.set_x_offset(offset_x)
        self._logger.debug(
            "placement.engine inserted key=%s row=%d column=%d scale=%.4f offset_x=%d",
            blob.name,
            row,
            column,
            scale,
            offset_x,
        )


__all__ = ["PlacementEngine", "fit_scale", "centering_offset", "match_key"]
