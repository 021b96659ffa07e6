"""
Cell styling for statement workbooks.
"""
from __future__ import annotations

from openpyxl.cell.cell import Cell
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ripdash.excel.styles import (
    ALTERNATE_FILL,
    CENTER,
    DATA_FONT,
    HEADER_FILL,
    HEADER_FONT,
    HIGHLIGHT_FILLS,
    KPI_LABEL_FONT,
    KPI_VALUE_FONT,
    LEFT,
    MONEY_FORMAT,
    NEGATIVE_FONT,
    POSITIVE_FONT,
    RIGHT,
    THIN_BORDER,
    TOTAL_BORDER,
    TOTAL_FILL,
    TOTAL_FONT,
)

NUMBER_FORMATS = {"money": MONEY_FORMAT, "number": "#,##0"}


def _apply_number_format(cell: Cell, col_type: str) -> None:
    fmt = NUMBER_FORMATS.get(col_type)
    if fmt:
        cell.number_format = fmt


def format_header_row(ws: Worksheet, row_num: int, num_cols: int) -> None:
    for cell in ws[row_num][:num_cols]:
        cell.font, cell.fill, cell.alignment, cell.border = HEADER_FONT, HEADER_FILL, CENTER, THIN_BORDER


def format_data_cell(
    ws: Worksheet,
    row_num: int,
    col_num: int,
    value,
    col_type: str = "text",
    is_total: bool = False,
    highlight: str | None = None,
) -> None:
    """Write one cell; money cells get a green/red font by sign."""
    cell = ws.cell(row=row_num, column=col_num, value=value)
    numeric = col_type in NUMBER_FORMATS
    cell.alignment = RIGHT if numeric else LEFT
    _apply_number_format(cell, col_type)

    if is_total:
        cell.font, cell.border = TOTAL_FONT, TOTAL_BORDER
    else:
        cell.border = THIN_BORDER
        signed = col_type == "money" and isinstance(value, (int, float)) and value != 0
        cell.font = (POSITIVE_FONT if value > 0 else NEGATIVE_FONT) if signed else DATA_FONT

    fill = HIGHLIGHT_FILLS.get(highlight or "")
    if fill is None and is_total:
        fill = TOTAL_FILL
    if fill is None and row_num % 2 == 0:
        fill = ALTERNATE_FILL
    if fill is not None:
        cell.fill = fill


def auto_column_width(ws: Worksheet, min_width: int = 10, max_width: int = 50) -> None:
    widths: dict[int, int] = {}
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None:
                continue
            widths[cell.column] = max(widths.get(cell.column, 0), len(str(cell.value)))
    for col, longest in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = min(max(longest + 2, min_width), max_width)


def add_kpi_card(ws: Worksheet, row: int, col: int, value, label: str, format_type: str = "money") -> None:
    """Big value over a small caption."""
    top = ws.cell(row=row, column=col, value=value)
    top.font, top.alignment = KPI_VALUE_FONT, CENTER
    _apply_number_format(top, format_type)

    caption = ws.cell(row=row + 1, column=col, value=label)
    caption.font, caption.alignment = KPI_LABEL_FONT, CENTER
