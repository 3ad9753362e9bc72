from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from shg.db.base import get_db
from shg.core.dependencies import get_viewing_user_id, get_period_filter
from shg.models.transaction import TransactionType
from shg.schemas.report import Report
from shg.schemas.summary import PeriodFilter
from shg.services.report import build_report
from shg.services.store import list_members, list_transactions

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=Report)
def get_report(
    type: Optional[TransactionType] = None,
    period: PeriodFilter = Depends(get_period_filter),
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Export rows for the period and type plus the all-time summary block."""
    return build_report(
        list_transactions(db, group_id),
        list_members(db, group_id),
        period=period,
        tx_type=type,
    )
