from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List
from decimal import Decimal


class ReportRow(BaseModel):
    """One exported transaction. Amounts are pre-formatted with two decimals;
    principal and interest read "-" on anything but a repayment."""
    model_config = ConfigDict(populate_by_name=True)

    member_name: str = Field(alias="memberName")
    date: str
    type: str
    description: str
    total_amount: str = Field(alias="totalAmount")
    principal: str
    interest: str


class Report(BaseModel):
    title: str
    rows: List[ReportRow]
    summary: Dict[str, Decimal]
