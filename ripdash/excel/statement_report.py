"""
Student statement workbook: summary, pivot by classification and all rows.
"""
from __future__ import annotations

import datetime as dt
import re
import unicodedata
from pathlib import Path

from ripdash.analytics.context import ViewContext
from ripdash.analytics.dashboard import statement_summary
from ripdash.excel.writer import ColSpec, ExcelWriter

PIVOT_COLS: list[ColSpec] = [
    ("classification", "text", "Clasificación"),
    ("payment_classification", "text", "Clasificación de pagos"),
    ("total", "money", "Movimiento"),
]

ROW_COLS: list[ColSpec] = [
    ("type_label", "text", "Tipo"),
    ("date_raw", "text", "Fecha"),
    ("time", "text", "Hora"),
    ("service", "text", "Servicio"),
    ("teacher", "text", "Profesor"),
    ("payment_note", "text", "Pago"),
    ("comment", "text", "Comentario"),
    ("id", "text", "ID"),
    ("classification", "text", "Clasificación"),
    ("secondary_classification", "text", "Clasificación de pagos"),
    ("amount", "money", "Movimiento"),
]


def _sign_highlight(row: dict) -> str | None:
    value = row.get("amount", row.get("total", 0)) or 0
    if value < 0:
        return "owes"
    if value > 0:
        return "owed"
    return None


def safe_filename(name: str) -> str:
    return re.sub(r"[^\w\-]+", "_", name, flags=re.UNICODE).strip("_")[:40] or "student"


def ascii_filename(name: str) -> str:
    """safe_filename() with accents folded to plain ASCII ("Pérez" -> "Perez")."""
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return safe_filename(folded)


def build_workbook(ctx: ViewContext) -> ExcelWriter | None:
    """Workbook for the context's selected student, None when unknown."""
    data = statement_summary(ctx)
    if data is None:
        return None

    student = data["student"]
    ew = ExcelWriter()
    ws = ew.add_sheet("Ficha")
    row = ew.write_title(
        ws,
        f"Ficha · {student['name']}",
        f"Registro (solo lectura)  |  Generado {dt.date.today():%Y-%m-%d}",
    )

    row = ew.write_section(ws, row, "RESUMEN")
    row = ew.write_kpi_row(ws, row, [
        (data["balance"], "SALDO", "money"),
        (len(data["rows"]), "REGISTROS", "number"),
        (data["last_date"] or "—", "ÚLTIMA FECHA", "text"),
        (data["last_payment_note"] or "—", "ÚLTIMO PAGO", "text"),
    ])

    row = ew.write_section(ws, row, "MOVIMIENTO POR CLASIFICACIÓN")
    ew.write_table(
        ws, row, PIVOT_COLS, data["pivot"],
        highlight_fn=_sign_highlight, freeze=False,
        total={"classification": "TOTAL", "payment_classification": "", "total": data["balance"]},
    )

    ws_rows = ew.add_sheet("Registros")
    ew.write_table(ws_rows, 1, ROW_COLS, data["rows"], highlight_fn=_sign_highlight)
    return ew


def generate_excel(ctx: ViewContext, output_dir: str | Path) -> Path | None:
    ew = build_workbook(ctx)
    if ew is None:
        return None
    name = ctx.student.name if ctx.student else ctx.student_key
    return ew.save(Path(output_dir) / f"Ficha_{safe_filename(name)}.xlsx")
