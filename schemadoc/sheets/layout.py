from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from schemadoc.models.layout import (
    DARK_GREY,
    WHITE,
    Color,
    GridRange,
    IndexEntry,
    LayoutCell,
    TextFormat,
)

"""Declarative layout of a table documentation sheet.

The sheet is described by two lists:
- TABLE_TEMPLATE: fixed regions (title, metadata cells, description block)
- FIELD_SLOTS: the 14-column field table; row FIELD_HEADER_ROW holds the labels and
  CSV data row ``i`` (i >= 1, row 0 is the CSV header) lands on sheet row
  ``i + DATA_ROW_OFFSET``.

build_table_layout() walks both lists and emits LayoutCells; nothing in the emission
loop knows concrete row/column numbers.
"""

__all__ = [
    "Region",
    "ColumnSlot",
    "TABLE_TEMPLATE",
    "FIELD_SLOTS",
    "FIELD_HEADER_ROW",
    "DATA_ROW_OFFSET",
    "SHEET_WIDTH",
    "build_table_layout",
    "build_index_entries",
]

FIELD_HEADER_ROW = 6
DATA_ROW_OFFSET = 6
SHEET_WIDTH = 14
FONT_SIZE = 10


@dataclass(frozen=True)
class CellStyle:
    background: Color
    foreground: Color | None


HEADER = CellStyle(background=DARK_GREY, foreground=WHITE)
VALUE = CellStyle(background=WHITE, foreground=None)
DATA = CellStyle(background=WHITE, foreground=DARK_GREY)


@dataclass(frozen=True)
class Region:
    """A fixed block of the template. ``text`` may contain ``{table_name}``."""
    name: str
    range: GridRange
    text: str = ""
    style: CellStyle = VALUE
    bold: bool = False


@dataclass(frozen=True)
class ColumnSlot:
    """One column of the field table.

    ``source`` is the CSV field index shown in the slot; None means the running row
    number (the "No" column).
    """
    label: str
    start_col: int
    end_col: int
    source: int | None


def _r(start_row: int, end_row: int, start_col: int, end_col: int) -> GridRange:
    return GridRange(start_row, end_row, start_col, end_col)


TABLE_TEMPLATE: tuple[Region, ...] = (
    Region("title", _r(0, 2, 0, 3), "テーブル仕様書", HEADER, bold=True),
    Region("logical_name_label", _r(0, 1, 3, 5), "テーブル論理名", HEADER),
    Region("physical_name_label", _r(1, 2, 3, 5), "テーブル物理名", HEADER),
    Region("logical_name", _r(0, 1, 5, 10)),
    Region("physical_name", _r(1, 2, 5, 10), "{table_name}"),
    Region("author_label", _r(0, 1, 10, 11), "作成者", HEADER),
    Region("author", _r(0, 1, 11, 12)),
    Region("modifier_label", _r(0, 1, 12, 13), "修正者", HEADER),
    Region("modifier", _r(0, 1, 13, 14)),
    Region("created_label", _r(1, 2, 10, 11), "作成日", HEADER),
    Region("created", _r(1, 2, 11, 12)),
    Region("modified_label", _r(1, 2, 12, 13), "修正日", HEADER),
    Region("modified", _r(1, 2, 13, 14)),
    Region("description_label", _r(2, 4, 0, 2), "内容説明", HEADER),
    Region("description", _r(2, 4, 2, 14)),
)

FIELD_SLOTS: tuple[ColumnSlot, ...] = (
    ColumnSlot("No", 0, 1, None),
    ColumnSlot("カラム名", 1, 4, 0),
    ColumnSlot("型", 4, 5, 1),
    ColumnSlot("主キー", 5, 6, 2),
    ColumnSlot("NULL", 6, 7, 3),
    ColumnSlot("unique", 7, 8, 4),
    ColumnSlot("index", 8, 9, 5),
    ColumnSlot("外部キー", 9, 10, 6),
    ColumnSlot("外部キーテーブル", 10, 11, 7),
    ColumnSlot("外部キーカラム", 11, 12, 8),
    ColumnSlot("コメント", 12, 14, 9),
)


def _cell(rng: GridRange, text: str, style: CellStyle, bold: bool = False) -> LayoutCell:
    return LayoutCell(
        range=rng,
        text=text,
        merge=True,
        horizontal_alignment="CENTER",
        vertical_alignment="MIDDLE",
        background=style.background,
        foreground=style.foreground,
        text_format=TextFormat(font_size=FONT_SIZE, bold=bold),
    )


def build_table_layout(table_name: str, rows: Sequence[Sequence[str]]) -> list[LayoutCell]:
    """Build the documentation sheet for one table.

    Args:
        table_name: sheet / table name, substituted into ``{table_name}`` regions
        rows: parsed CSV rows, header row first (it is skipped)

    Returns:
        LayoutCells in emission order: template regions, field header, then data rows.
    """
    cells: list[LayoutCell] = []
    for region in TABLE_TEMPLATE:
        cells.append(_cell(region.range, region.text.format(table_name=table_name), region.style, region.bold))

    for slot in FIELD_SLOTS:
        rng = GridRange(FIELD_HEADER_ROW, FIELD_HEADER_ROW + 1, slot.start_col, slot.end_col)
        cells.append(_cell(rng, slot.label, HEADER))

    for ri, record in enumerate(rows):
        if ri == 0:
            continue
        row = ri + DATA_ROW_OFFSET
        for slot in FIELD_SLOTS:
            if slot.source is None:
                text = str(ri)
            else:
                text = record[slot.source] if slot.source < len(record) else ""
            cells.append(_cell(GridRange(row, row + 1, slot.start_col, slot.end_col), text, DATA))
    return cells


def build_index_entries(sheets: Sequence[tuple[str, int]]) -> list[IndexEntry]:
    """One index row per processed table, in the given (processing) order."""
    return [
        IndexEntry(table_name=name, sheet_id=sheet_id, row_index=i)
        for i, (name, sheet_id) in enumerate(sheets)
    ]
