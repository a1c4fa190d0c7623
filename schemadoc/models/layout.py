from __future__ import annotations

from dataclasses import dataclass

"""Layout models for generated documentation sheets.

A LayoutCell is one rectangular range on a sheet together with everything that should
be applied to it: optional merge, cell format, value and borders.
"""

__all__ = [
    "Color",
    "TextFormat",
    "GridRange",
    "BorderStyle",
    "LayoutCell",
    "IndexEntry",
    "WHITE",
    "BLACK",
    "DARK_GREY",
]


@dataclass(frozen=True)
class Color:
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0

    def to_api(self) -> dict[str, float]:
        return {"red": self.red, "green": self.green, "blue": self.blue}


WHITE = Color(1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0)
DARK_GREY = Color(0.25, 0.25, 0.25)


@dataclass(frozen=True)
class TextFormat:
    font_size: int = 10
    bold: bool = False


@dataclass(frozen=True)
class GridRange:
    """Half-open, zero-based range (end indexes are exclusive)."""
    start_row: int
    end_row: int
    start_col: int
    end_col: int

    def __post_init__(self) -> None:
        if self.start_row < 0 or self.start_col < 0:
            raise ValueError(f"negative grid index: {self}")
        if self.end_row <= self.start_row or self.end_col <= self.start_col:
            raise ValueError(f"empty grid range: {self}")


@dataclass(frozen=True)
class BorderStyle:
    style: str = "SOLID"
    width: int = 1
    color: Color = BLACK


@dataclass(frozen=True)
class LayoutCell:
    range: GridRange
    text: str = ""
    link: str | None = None
    merge: bool = True
    horizontal_alignment: str = "CENTER"
    vertical_alignment: str = "MIDDLE"
    background: Color = WHITE
    foreground: Color | None = None
    text_format: TextFormat = TextFormat()
    border: BorderStyle = BorderStyle()


@dataclass(frozen=True)
class IndexEntry:
    table_name: str
    sheet_id: int
    row_index: int
