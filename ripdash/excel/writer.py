"""
ExcelWriter — small builder for styled workbooks.
"""
from __future__ import annotations

import io
from pathlib import Path

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ripdash.excel.formatters import add_kpi_card, auto_column_width, format_data_cell, format_header_row
from ripdash.excel.styles import SECTION_FONT, SUBTITLE_FONT, TITLE_FONT

ColSpec = tuple[str, str, str]  # (row key, "money" | "number" | "text", header label)


def _blank_for(col_type: str):
    return 0 if col_type in ("money", "number") else ""


class ExcelWriter:
    def __init__(self) -> None:
        self.wb = Workbook()
        self._sheets: list[Worksheet] = []

    def add_sheet(self, title: str) -> Worksheet:
        """Append a worksheet; the workbook's default sheet is reused for the first one."""
        if self._sheets:
            ws = self.wb.create_sheet(title=title)
        else:
            ws = self.wb.active
            ws.title = title
        self._sheets.append(ws)
        return ws

    def write_title(self, ws: Worksheet, title: str, subtitle: str, merge_cols: int = 6) -> int:
        """Title and subtitle banner on rows 1-2. Returns the first free row."""
        for row, (text, font) in enumerate(((title, TITLE_FONT), (subtitle, SUBTITLE_FONT)), 1):
            ws.cell(row=row, column=1, value=text).font = font
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=merge_cols)
        return 4

    def write_section(self, ws: Worksheet, row: int, title: str) -> int:
        ws.cell(row=row, column=1, value=title).font = SECTION_FONT
        return row + 2

    def write_kpi_row(self, ws: Worksheet, row: int, kpis: list[tuple], start_col: int = 1, col_spacing: int = 2) -> int:
        """Cards laid out left to right from (value, label, format) tuples."""
        for i, (value, label, fmt) in enumerate(kpis):
            add_kpi_card(ws, row, start_col + i * col_spacing, value, label, fmt)
        return row + 3

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: list[ColSpec],
        rows: list[dict],
        highlight_fn=None,
        freeze: bool = True,
        total: dict | None = None,
    ) -> int:
        """Header, one line per dict in `rows`, then an optional bold total line.

        highlight_fn(row_data) returns a HIGHLIGHT_FILLS name or None.
        Returns the first row below the table.
        """
        for col_num, (_, _, label) in enumerate(columns, 1):
            ws.cell(row=start_row, column=col_num, value=label)
        format_header_row(ws, start_row, len(columns))

        current = start_row
        for current, row_data in enumerate(rows, start_row + 1):
            fill = highlight_fn(row_data) if highlight_fn else None
            for col_num, (key, col_type, _) in enumerate(columns, 1):
                value = row_data.get(key)
                format_data_cell(
                    ws, current, col_num,
                    _blank_for(col_type) if value is None else value,
                    col_type, highlight=fill,
                )

        if total is not None:
            current += 1
            for col_num, (key, col_type, _) in enumerate(columns, 1):
                format_data_cell(ws, current, col_num, total.get(key, ""), col_type, is_total=True)

        auto_column_width(ws)
        if freeze:
            ws.freeze_panes = ws.cell(row=start_row + 1, column=1)
        return current + 1

    def save(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(target)
        return target

    def to_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.wb.save(buf)
        return buf.getvalue()
