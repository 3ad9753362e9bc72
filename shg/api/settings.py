from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shg.db.base import get_db
from shg.core.dependencies import get_viewing_user_id
from shg.schemas.group import GroupSettingsResponse, GroupSettingsUpdate
from shg.services.group import get_group_settings, update_group_settings

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=GroupSettingsResponse)
def get_settings_endpoint(
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    return get_group_settings(db, group_id)


@router.put("", response_model=GroupSettingsResponse)
def update_settings_endpoint(
    settings_data: GroupSettingsUpdate,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    return update_group_settings(
        db=db,
        group_id=group_id,
        group_name=settings_data.group_name,
        monthly_contribution=settings_data.monthly_contribution,
        interest_rate=settings_data.interest_rate,
        established_date=settings_data.established_date,
    )
