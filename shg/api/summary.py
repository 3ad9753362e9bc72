from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from shg.db.base import get_db
from shg.core.dependencies import get_viewing_user_id, get_period_filter
from shg.schemas.summary import GroupSummary, MonthlyOverview, PeriodFilter
from shg.services.store import list_members, list_transactions
from shg.services.summary import compute_group_summary, compute_monthly_overview

router = APIRouter(prefix="/api/summary", tags=["summary"])


@router.get("", response_model=GroupSummary)
def get_group_summary(
    period: PeriodFilter = Depends(get_period_filter),
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Group totals over contributing members for the selected period."""
    return compute_group_summary(list_transactions(db, group_id), list_members(db, group_id), period)


@router.get("/monthly-overview", response_model=MonthlyOverview)
def get_monthly_overview(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Totals and participants of a month; defaults to the latest month with activity."""
    return compute_monthly_overview(
        list_transactions(db, group_id),
        list_members(db, group_id),
        year=year,
        month=month,
    )
