"""
RIP Dashboard — FastAPI app factory with staged startup loading.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ripdash.api.dependencies import set_store
from ripdash.api.router_dashboard import router as dashboard_router
from ripdash.api.router_meta import router as meta_router
from ripdash.api.router_records import router as records_router
from ripdash.api.router_students import router as students_router
from ripdash.data.store import DataStore
from ripdash.errors import FetchError, RipError, SchemaError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Fast snapshot first, full snapshot on a background thread."""
    from ripdash.config import CACHE_DIR, CACHE_TTL_SECONDS

    print(f"  CACHE_DIR = {CACHE_DIR}")
    print(f"  CACHE_TTL = {CACHE_TTL_SECONDS:.0f}s")

    store = app.state.store if getattr(app.state, "store", None) else DataStore()
    set_store(store)
    try:
        store.load_fast()
        print(f"\nRIP Dashboard ready (fast) — {store.row_count():,} records, "
              f"{len(store.students)} students\n")
    except RipError as exc:
        print(f"\nFast load failed: {exc} — waiting for full load\n")
    store.load_full_in_background()
    yield


def _error_response(code: int, exc: RipError, **extra) -> JSONResponse:
    return JSONResponse(status_code=code, content={"detail": str(exc), **extra})


def create_app(store: DataStore | None = None, load_on_startup: bool = True) -> FastAPI:
    app = FastAPI(
        title="RIP Dashboard API",
        description="Read-only class registration analytics — classification, balances, statements",
        version="1.0.0",
        lifespan=lifespan if load_on_startup else None,
    )
    app.state.store = store
    if store is not None:
        set_store(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FetchError)
    async def fetch_error_handler(request: Request, exc: FetchError):
        return _error_response(502, exc, status=exc.status)

    @app.exception_handler(SchemaError)
    async def schema_error_handler(request: Request, exc: SchemaError):
        return _error_response(422, exc, missing=exc.missing)

    app.include_router(meta_router)
    app.include_router(dashboard_router)
    app.include_router(students_router)
    app.include_router(records_router)
    return app


app = create_app()
