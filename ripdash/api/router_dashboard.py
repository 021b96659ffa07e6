"""
Dashboard endpoints — classification and balance pages.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ripdash.analytics.context import ViewContext
from ripdash.analytics.dashboard import balance_summary, classification_summary
from ripdash.api.dependencies import get_full_context

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/classification")
def classification(ctx: ViewContext = Depends(get_full_context)):
    """Active / to-review / inactive students by params-sheet label."""
    return classification_summary(ctx.students)


@router.get("/balances")
def balances(ctx: ViewContext = Depends(get_full_context)):
    """Owes / settled / owed-to-them students plus global balance KPIs."""
    return balance_summary(ctx.students, ctx.records)
