from typing import Optional
from datetime import date
from fastapi import Header, HTTPException, status
from shg.core.config import settings
from shg.schemas.summary import PeriodFilter


async def get_viewing_user_id(
    x_viewing_user: Optional[str] = Header(None)
) -> str:
    """Resolve whose books this request works on.

    Taken from the X-Viewing-User header, falling back to the configured
    VIEWING_USER_ID. Every read and write is scoped to this id.
    """
    group_id = (x_viewing_user or "").strip() or settings.VIEWING_USER_ID
    if not group_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No viewing user: send the X-Viewing-User header or set VIEWING_USER_ID"
        )
    return group_id


def get_period_filter(
    period: str = "all",
    year: Optional[int] = None,
    month: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> PeriodFilter:
    """Build the date window from query parameters."""
    try:
        return PeriodFilter(kind=period, year=year, month=month, start=start, end=end)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
