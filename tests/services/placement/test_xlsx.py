from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.units import pixels_to_EMU

from conftest import make_png
from driveimage.core.errors import PlatformFault
from driveimage.services.placement.base import CellRange, ImageBlob, PlacementOptions
from driveimage.services.placement.engine import PlacementEngine
from driveimage.services.placement.local import LocalFolder
from driveimage.services.placement.xlsx import XlsxSheet, XlsxWorkbook, points_to_px, width_to_px


def _workbook(tmp_path: Path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "Items"
    ws["A1"] = "cat"
    ws["A2"] = 101
    ws.row_dimensions[1].height = 30
    ws.column_dimensions["B"].width = 20
    path = tmp_path / "items.xlsx"
    wb.save(path)
    return path


def test_unit_conversions() -> None:
    assert points_to_px(15) == pytest.approx(20)
    assert points_to_px(30) == pytest.approx(40)
    assert width_to_px(20) == 140
    assert width_to_px(9.140625) == 64


def test_sheet_geometry_defaults(tmp_path: Path) -> None:
    sheet = XlsxWorkbook(_workbook(tmp_path)).sheet("Items")
    assert sheet.row_height_px(1) == pytest.approx(40)
    assert sheet.row_height_px(2) == pytest.approx(20)
    assert sheet.column_width_px(2) == 140
    assert sheet.column_width_px(3) == 64


def test_values_and_blank_checks(tmp_path: Path) -> None:
    sheet = XlsxWorkbook(_workbook(tmp_path)).sheet()
    assert sheet.values(CellRange.from_a1("A1:A3")) == [["cat"], [101], [None]]
    assert sheet.is_blank(CellRange.from_a1("B1:B2"))
    assert not sheet.is_blank(CellRange.from_a1("A1:B1"))


def test_inserted_image_is_fit_and_centred(tmp_path: Path) -> None:
    images = tmp_path / "images"
    images.mkdir()
    (images / "cat.png").write_bytes(make_png(200, 100))
    (images / "101.png").write_bytes(make_png(10, 40, "blue"))
    path = _workbook(tmp_path)
    workbook = XlsxWorkbook(path)
    sheet = workbook.sheet("Items")

    engine = PlacementEngine(sheet, LocalFolder(images), PlacementOptions(file_ext="png"))
    result = engine.run(CellRange.from_a1("A1:A2"))

    assert result.match_counts == {"cat": 1, "101": 1}
    cat, number = sheet.images
    # 200x100 image in a 140x40 cell: scale 0.4
    assert (cat.width, cat.height) == (pytest.approx(80), pytest.approx(40))
    assert cat.x_offset == 30
    marker = cat.image.anchor._from
    assert (marker.col, marker.row) == (1, 0)
    assert marker.colOff == pixels_to_EMU(30)
    assert cat.image.anchor.ext.cx == pixels_to_EMU(cat.width)
    # 10x40 image in a 140x20 cell: scale 0.5
    assert (number.width, number.height) == (pytest.approx(5), pytest.approx(20))
    assert number.x_offset == 67

    saved = workbook.save(tmp_path / "out.xlsx")
    reloaded = load_workbook(saved)["Items"]
    assert reloaded["A1"].value == "cat"
    assert len(reloaded._images) == 2


def test_bad_image_data_is_platform_fault(tmp_path: Path) -> None:
    sheet = XlsxSheet(Workbook().active)
    with pytest.raises(PlatformFault):
        sheet.insert_image(ImageBlob(name="broken", data=b"not an image"), 2, 1)


def test_missing_workbook_and_sheet(tmp_path: Path) -> None:
    with pytest.raises(PlatformFault):
        XlsxWorkbook(tmp_path / "absent.xlsx")
    with pytest.raises(PlatformFault):
        XlsxWorkbook(_workbook(tmp_path)).sheet("Nope")


def test_style_only_column_keeps_default_width(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws.column_dimensions["C"].font = Font(bold=True)
    ws.column_dimensions["D"].width = 20
    path = tmp_path / "styled.xlsx"
    wb.save(path)

    assert XlsxSheet(ws).column_width_px(3) == 64
    reloaded = XlsxWorkbook(path).sheet()
    assert reloaded.column_width_px(3) == 64
    assert reloaded.column_width_px(4) == 140
