"""
FastAPI dependencies — DataStore singleton, view context, filter parsing.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import Depends, HTTPException, Query

from ripdash.analytics.context import ViewContext
from ripdash.data.archive import ArchiveLookup
from ripdash.data.schemas import FilterSpec
from ripdash.data.store import DataStore, LoadState

# ---------------------------------------------------------------------------
# Singletons (set during startup)
# ---------------------------------------------------------------------------
_store: DataStore | None = None
_archive: ArchiveLookup | None = None


def set_store(store: DataStore) -> None:
    global _store
    _store = store


def set_archive(archive: ArchiveLookup) -> None:
    global _archive
    _archive = archive


def get_store() -> DataStore:
    if _store is None or not _store.is_loaded:
        raise HTTPException(503, "Data not loaded yet")
    return _store


def get_store_or_empty() -> DataStore:
    """The store even before the first load succeeds (health/reload)."""
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


def get_archive() -> ArchiveLookup:
    global _archive
    if _archive is None:
        _archive = ArchiveLookup()
    return _archive


def get_full_store(store: DataStore = Depends(get_store)) -> DataStore:
    """The store, 503 until the full snapshot (amounts, classifications) is in."""
    if store.state != LoadState.FULL:
        raise HTTPException(503, f"Full data still loading (state: {store.state.value})")
    return store


def get_context(store: DataStore = Depends(get_store)) -> ViewContext:
    snapshot = store.snapshot
    return ViewContext(records=snapshot.records, students=snapshot.students)


def get_full_context(store: DataStore = Depends(get_full_store)) -> ViewContext:
    return get_context(store)


# ---------------------------------------------------------------------------
# Filter parsing from query params
# ---------------------------------------------------------------------------

def parse_filters(
    student: Optional[str] = Query(None, description="Student key or exact name"),
    teacher: Optional[str] = Query(None),
    entry_type: Optional[str] = Query(None, alias="type", description="all|clase|pago"),
    service: Optional[list[str]] = Query(None, description="Service name (repeatable)"),
    date_from: Optional[dt.date] = Query(None, description="YYYY-MM-DD, inclusive"),
    date_to: Optional[dt.date] = Query(None, description="YYYY-MM-DD, inclusive"),
    store: DataStore = Depends(get_store),
) -> FilterSpec:
    student_key = ""
    if student:
        student_key = student if store.student(student) else store.find_student_key(student)
        if not student_key:
            raise HTTPException(404, f"Student not found: {student}")

    if entry_type and entry_type.lower() not in ("all", "clase", "class", "pago", "payment"):
        raise HTTPException(400, f"Invalid type: {entry_type}")

    return FilterSpec.from_values(
        student_key=student_key,
        teacher=teacher or "",
        entry_type=entry_type,
        services=service,
        date_from=date_from,
        date_to=date_to,
    )
