import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shg.core.exceptions import ValidationError, StoreError
from shg.db.base import unit_of_work
from shg.models.system import GroupSettings
from shg.services.accounting import ZERO, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_GROUP_NAME = "My Self-Help Group"


def find_group_settings(db: Session, group_id: str) -> Optional[GroupSettings]:
    try:
        return db.get(GroupSettings, group_id)
    except SQLAlchemyError as e:
        logger.error(f"Store failure while reading settings of group {group_id}: {e}")
        raise StoreError(f"Failed to read settings of group {group_id}") from e


def get_group_settings(db: Session, group_id: str) -> GroupSettings:
    """Settings of the group; an unsaved default when none exist yet."""
    group = find_group_settings(db, group_id)
    if group is None:
        return GroupSettings(group_id=group_id, group_name=DEFAULT_GROUP_NAME)
    return group


def update_group_settings(
    db: Session,
    group_id: str,
    group_name: str = None,
    monthly_contribution=None,
    interest_rate=None,
    established_date: date = None
) -> GroupSettings:
    """Create or update the group's configuration."""
    if group_name is not None and not group_name.strip():
        raise ValidationError("Group name cannot be empty")
    if monthly_contribution is not None and to_decimal(monthly_contribution) < ZERO:
        raise ValidationError("Monthly contribution cannot be negative")
    if interest_rate is not None and to_decimal(interest_rate) < ZERO:
        raise ValidationError("Interest rate cannot be negative")

    group = find_group_settings(db, group_id)
    with unit_of_work(db, f"update settings of group {group_id}"):
        if group is None:
            group = GroupSettings(group_id=group_id, group_name=DEFAULT_GROUP_NAME)
            db.add(group)
        if group_name is not None:
            group.group_name = group_name.strip()
        if monthly_contribution is not None:
            group.monthly_contribution = to_decimal(monthly_contribution)
        if interest_rate is not None:
            group.interest_rate = to_decimal(interest_rate)
        if established_date is not None:
            group.established_date = established_date

    db.refresh(group)
    logger.info(f"Settings of group {group_id} updated")
    return group
