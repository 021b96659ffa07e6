"""
Student endpoints — statement, statement workbook, prior-year archive.

Statements need amounts, so they wait for the full snapshot; the archive
only needs the student's name and is served from any snapshot.
"""
from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ripdash.analytics.context import ViewContext
from ripdash.analytics.dashboard import statement_summary
from ripdash.api.dependencies import get_archive, get_context, get_full_context
from ripdash.data.archive import ArchiveLookup
from ripdash.excel.statement_report import ascii_filename, build_workbook, safe_filename

router = APIRouter(prefix="/api/students", tags=["students"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def content_disposition(student_name: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 name (RFC 6266)."""
    fallback = f"Ficha_{ascii_filename(student_name)}.xlsx"
    utf8_name = f"Ficha_{safe_filename(student_name)}.xlsx"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(utf8_name)}"


def _student_context(key: str, ctx: ViewContext) -> ViewContext:
    selected = ctx.with_student(key)
    if selected.student is None:
        raise HTTPException(404, f"Student not found: {key}")
    return selected


@router.get("/{key}/statement")
def statement(key: str, ctx: ViewContext = Depends(get_full_context)):
    """Rows newest first, balance, pivot and last class/payment."""
    return statement_summary(_student_context(key, ctx))


@router.get("/{key}/statement.xlsx")
def statement_xlsx(key: str, ctx: ViewContext = Depends(get_full_context)):
    selected = _student_context(key, ctx)
    ew = build_workbook(selected)
    return Response(
        content=ew.to_bytes(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(selected.student.name)},
    )


@router.get("/{key}/archive")
def archive(
    key: str,
    ctx: ViewContext = Depends(get_context),
    lookup: ArchiveLookup = Depends(get_archive),
):
    """Prior-year rows for the student (columns C..L, newest first)."""
    selected = _student_context(key, ctx)
    return lookup.for_student(selected.student.name).to_dict()
