from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from schemadoc.models.layout import BorderStyle, GridRange, IndexEntry, LayoutCell

"""Sheets API v4 request bodies for layout cells and the index sheet.

Each LayoutCell becomes, in this order: mergeCells (when merge is set), repeatCell
(format + value) and updateBorders, all on the same range.
"""

__all__ = [
    "CELL_FIELDS",
    "INDEX_SHEET_TITLE",
    "INDEX_LINK_COLUMN",
    "hyperlink_formula",
    "grid_range",
    "cell_requests",
    "layout_requests",
    "add_sheet_request",
    "index_requests",
]

CELL_FIELDS = (
    "userEnteredFormat(backgroundColor,horizontalAlignment,verticalAlignment,textFormat),"
    "userEnteredValue"
)
INDEX_SHEET_TITLE = "インデックス"
INDEX_LINK_COLUMN = 1


def _quote(text: str) -> str:
    return text.replace('"', '""')


def hyperlink_formula(link: str, text: str) -> str:
    return f'=HYPERLINK("{_quote(link)}", "{_quote(text)}")'


def grid_range(sheet_id: int, rng: GridRange) -> dict[str, int]:
    return {
        "sheetId": sheet_id,
        "startRowIndex": rng.start_row,
        "endRowIndex": rng.end_row,
        "startColumnIndex": rng.start_col,
        "endColumnIndex": rng.end_col,
    }


def _border(style: BorderStyle) -> dict[str, Any]:
    return {"style": style.style, "width": style.width, "color": style.color.to_api()}


def _cell_value(cell: LayoutCell) -> dict[str, str] | None:
    if not cell.text:
        return None
    if cell.link:
        return {"formulaValue": hyperlink_formula(cell.link, cell.text)}
    return {"stringValue": cell.text}


def cell_requests(sheet_id: int, cell: LayoutCell) -> list[dict[str, Any]]:
    requests: list[dict[str, Any]] = []
    if cell.merge:
        requests.append(
            {"mergeCells": {"range": grid_range(sheet_id, cell.range), "mergeType": "MERGE_ALL"}}
        )

    text_format: dict[str, Any] = {
        "fontSize": cell.text_format.font_size,
        "bold": cell.text_format.bold,
    }
    if cell.foreground is not None:
        text_format["foregroundColor"] = cell.foreground.to_api()
    cell_data: dict[str, Any] = {
        "userEnteredFormat": {
            "backgroundColor": cell.background.to_api(),
            "horizontalAlignment": cell.horizontal_alignment,
            "verticalAlignment": cell.vertical_alignment,
            "textFormat": text_format,
        }
    }
    value = _cell_value(cell)
    if value is not None:
        cell_data["userEnteredValue"] = value
    requests.append(
        {
            "repeatCell": {
                "range": grid_range(sheet_id, cell.range),
                "cell": cell_data,
                "fields": CELL_FIELDS,
            }
        }
    )

    border = _border(cell.border)
    requests.append(
        {
            "updateBorders": {
                "range": grid_range(sheet_id, cell.range),
                "top": border,
                "bottom": border,
                "left": border,
                "right": border,
                "innerHorizontal": border,
                "innerVertical": border,
            }
        }
    )
    return requests


def layout_requests(sheet_id: int, cells: Iterable[LayoutCell]) -> list[dict[str, Any]]:
    requests: list[dict[str, Any]] = []
    for cell in cells:
        requests.extend(cell_requests(sheet_id, cell))
    return requests


def add_sheet_request(title: str) -> dict[str, Any]:
    return {"addSheet": {"properties": {"title": title}}}


def index_requests(index_sheet_id: int, entries: Iterable[IndexEntry]) -> list[dict[str, Any]]:
    """Rename the index sheet and write one ``#gid=`` hyperlink per entry."""
    requests: list[dict[str, Any]] = [
        {
            "updateSheetProperties": {
                "properties": {"sheetId": index_sheet_id, "title": INDEX_SHEET_TITLE},
                "fields": "title",
            }
        }
    ]
    for entry in entries:
        formula = f'=HYPERLINK("#gid={entry.sheet_id}","{_quote(entry.table_name)}")'
        requests.append(
            {
                "updateCells": {
                    "start": {
                        "sheetId": index_sheet_id,
                        "rowIndex": entry.row_index,
                        "columnIndex": INDEX_LINK_COLUMN,
                    },
                    "rows": [{"values": [{"userEnteredValue": {"formulaValue": formula}}]}],
                    "fields": "userEnteredValue",
                }
            }
        )
    return requests
