"""
Registration table endpoint with filters.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ripdash.analytics.common import sanitize_for_json
from ripdash.analytics.context import ViewContext
from ripdash.analytics.dashboard import record_row
from ripdash.api.dependencies import get_context, parse_filters
from ripdash.config import RECORDS_LIMIT
from ripdash.data.schemas import FilterSpec

router = APIRouter(prefix="/api", tags=["records"])


@router.get("/records")
def records(
    limit: int = Query(RECORDS_LIMIT, ge=1, le=20000),
    spec: FilterSpec = Depends(parse_filters),
    ctx: ViewContext = Depends(get_context),
):
    """Filtered registration rows in sheet order; `total` counts all matches."""
    rows = ctx.with_filters(spec).filtered()
    return sanitize_for_json({
        "total": len(rows),
        "rows": [record_row(r) for r in rows[:limit]],
    })
