from __future__ import annotations

import itertools
import math

import pytest

from conftest import FakeFolder, FakeSheet
from driveimage.core.errors import DestinationOccupied, InvalidSelectionShape
from driveimage.services.placement.base import CellGeometry, CellRange, PlacementOptions
from driveimage.services.placement.engine import PlacementEngine, centering_offset, fit_scale, match_key


def _engine(sheet: FakeSheet, folder: FakeFolder, **options) -> PlacementEngine:
    ticks = itertools.count()
    return PlacementEngine(
        sheet,
        folder,
        PlacementOptions(file_ext=options.pop("file_ext", "png"), **options),
        clock=lambda: float(next(ticks)),
    )


def test_cat_dog_dog_example() -> None:
    sheet = FakeSheet(
        {(1, 1): "cat", (2, 1): "dog", (3, 1): "dog"},
        row_heights={1: 40, 2: 60, 3: 30},
        column_widths={2: 80},
        image_sizes={"cat-1": (200, 100), "dog-a": (100, 400), "dog-b": (10, 10)},
    )
    folder = FakeFolder([("cat.png", "cat-1"), ("dog.png", "dog-a"), ("dog.png", "dog-b"), ("cat.jpg", "x")])

    result = _engine(sheet, folder).run(CellRange.from_a1("A1:A3"))

    assert result.match_counts == {"cat": 1, "dog": 2}
    assert list(result.match_counts) == ["cat", "dog"]
    assert result.duplicates() == {"dog": 2}
    assert result.inserted == 3
    assert [(image.name, image.row, image.column) for image in sheet.images] == [
        ("cat", 1, 2),
        ("dog", 2, 2),
        ("dog", 3, 2),
    ]
    for image in sheet.images:
        assert image.height <= sheet.row_height_px(image.row) + 1e-9
        assert image.width <= sheet.column_width_px(image.column) + 1e-9


def test_fit_scale_and_centering_for_cat() -> None:
    sheet = FakeSheet({(1, 1): "cat"}, row_heights={1: 40}, column_widths={2: 80}, image_sizes={"c": (200, 100)})
    _engine(sheet, FakeFolder([("cat.png", "c")])).run(CellRange.from_a1("A1"))

    image = sheet.images[0]
    # min(40/200, 80/100) = 0.2
    assert image.height == pytest.approx(40)
    assert image.width == pytest.approx(20)
    assert image.x_offset == 30


def test_key_without_match_is_skipped() -> None:
    sheet = FakeSheet({(1, 1): "ghost", (2, 1): "cat"})
    result = _engine(sheet, FakeFolder([("cat.png", "c")])).run(CellRange.from_a1("A1:A2"))

    assert result.match_counts == {"ghost": 0, "cat": 1}
    assert result.missing() == ["ghost"]
    assert [(image.name, image.row) for image in sheet.images] == [("cat", 2)]


def test_duplicates_insert_a_single_image_and_fetch_once() -> None:
    sheet = FakeSheet({(1, 1): "dog"})
    folder = FakeFolder([("dog.png", "d1"), ("dog.png", "d2"), ("dog.png", "d3")])
    result = _engine(sheet, folder).run(CellRange.from_a1("A1"))

    assert result.match_counts == {"dog": 3}
    assert len(sheet.images) == 1
    assert len(folder.fetched) == 1


def test_horizontal_insert_before_goes_to_previous_row() -> None:
    sheet = FakeSheet({(5, 2): "a", (5, 3): "b"}, image_sizes={"pa": (10, 10), "pb": (10, 10)})
    folder = FakeFolder([("a.jpg", "pa"), ("b.jpg", "pb")])
    _engine(sheet, folder, file_ext="jpg", vertical=False, insert_after=False).run(CellRange.from_a1("B5:C5"))

    assert [(image.row, image.column) for image in sheet.images] == [(4, 2), (4, 3)]


def test_occupied_destination_leaves_sheet_unchanged() -> None:
    cells = {(1, 1): "cat", (2, 1): "dog", (2, 2): "note"}
    sheet = FakeSheet(cells)
    folder = FakeFolder([("cat.png", "c"), ("dog.png", "d")])

    with pytest.raises(DestinationOccupied) as info:
        _engine(sheet, folder).run(CellRange.from_a1("A1:A2"))

    assert info.value.match_counts == {"cat": 1, "dog": 1}
    assert sheet.images == []
    assert sheet.cells == cells


def test_invalid_shape_fails_before_lookup() -> None:
    sheet = FakeSheet({(1, 1): "cat", (1, 2): "dog"})
    folder = FakeFolder([("cat.png", "c")])
    with pytest.raises(InvalidSelectionShape):
        _engine(sheet, folder).run(CellRange.from_a1("A1:B1"))
    assert folder.fetched == []
    assert sheet.images == []


def test_timings_are_measured_from_start() -> None:
    sheet = FakeSheet({(1, 1): "cat"})
    result = _engine(sheet, FakeFolder([("cat.png", "c")])).run(CellRange.from_a1("A1"))
    assert result.fetch_seconds == 1.0
    assert result.total_seconds == 2.0


def test_match_key_names_blob_after_bare_key() -> None:
    match = match_key(FakeFolder([("photo 1.png", "p")]), "photo 1", "png")
    assert match.match_count == 1
    assert match.blob is not None and match.blob.name == "photo 1"
    assert match_key(FakeFolder([]), "photo 1", "png").blob is None


@pytest.mark.parametrize(
    "cell_h, cell_w, img_h, img_w",
    [
        (21, 100, 1, 1),
        (21, 100, 3000, 17),
        (100, 21, 17, 3000),
        (33, 77, 33, 77),
        (19.5, 64, 1080, 1920),
        (7, 3, 13, 11),
    ],
)
def test_fit_scale_never_overflows(cell_h: float, cell_w: float, img_h: float, img_w: float) -> None:
    scale = fit_scale(CellGeometry(height_px=cell_h, width_px=cell_w), img_h, img_w)
    assert img_h * scale <= cell_h + 1e-9
    assert img_w * scale <= cell_w + 1e-9
    assert math.isclose(img_h * scale, cell_h) or math.isclose(img_w * scale, cell_w)
    if img_w * scale <= cell_w:
        assert centering_offset(cell_w, img_w * scale) >= 0


def test_centering_offset_floors() -> None:
    assert centering_offset(100, 45) == 27
    assert centering_offset(100, 100) == 0
