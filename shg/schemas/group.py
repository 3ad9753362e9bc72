from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
from decimal import Decimal


class GroupSettingsUpdate(BaseModel):
    group_name: Optional[str] = Field(None, max_length=100)
    monthly_contribution: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    established_date: Optional[date] = None


class GroupSettingsResponse(BaseModel):
    group_id: str
    group_name: str
    monthly_contribution: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    established_date: Optional[date] = None

    class Config:
        from_attributes = True
