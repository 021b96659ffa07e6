"""
Meta endpoints: health, students, services, teachers, reload.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ripdash.api.dependencies import get_store, get_store_or_empty
from ripdash.api.response_models import (
    HealthResponse, ReloadResponse, ServicesResponse, StudentsResponse, TeachersResponse,
)
from ripdash.data.store import DataStore

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: DataStore = Depends(get_store_or_empty)):
    return HealthResponse(
        status="ok" if store.is_loaded else "loading",
        state=store.state.value,
        rows=store.row_count(),
        students=len(store.students),
        loaded_at=store.loaded_at_label(),
        last_error=str(store.last_error) if store.last_error else None,
    )


@router.get("/students", response_model=StudentsResponse)
def list_students(
    q: str = Query("", description="Name search (accent/case-insensitive)"),
    store: DataStore = Depends(get_store),
):
    students = store.suggest_students(q)
    return StudentsResponse(students=[s.to_dict() for s in students], count=len(students))


@router.get("/students/lookup")
def lookup_student(name: str = Query(...), store: DataStore = Depends(get_store)):
    """Exact (normalized) name match → student key, "" when no match."""
    return {"name": name, "key": store.find_student_key(name)}


@router.get("/services", response_model=ServicesResponse)
def list_services(store: DataStore = Depends(get_store)):
    return ServicesResponse(services=store.services())


@router.get("/teachers", response_model=TeachersResponse)
def list_teachers(store: DataStore = Depends(get_store)):
    return TeachersResponse(teachers=store.teachers())


@router.post("/reload", response_model=ReloadResponse)
def reload_data(
    force: bool = Query(True, description="Bypass the local cache"),
    wait: bool = Query(False, description="Block until the load finishes"),
    store: DataStore = Depends(get_store_or_empty),
):
    """Re-fetch both sheets.

    By default returns immediately and reloads in the background; the current
    snapshot keeps serving until the new one is ready.
    """
    if wait:
        store.load_full(force=force)
        return ReloadResponse(status="ok", message=f"Reloaded {store.row_count():,} records")

    if store.load_full_in_background(force=force) is None:
        return ReloadResponse(status="already_reloading", message="A reload is already in progress.")
    return ReloadResponse(
        status="reloading",
        message="Reload started in background. Check /api/health for the new state.",
    )
