from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import date
from decimal import Decimal
import calendar


class PeriodFilter(BaseModel):
    """Date window applied to transactions before aggregation.

    `month` is 1-12. A custom range is inclusive; a missing `end` means the
    single day `start`.
    """
    kind: Literal["all", "monthly", "yearly", "custom"] = "all"
    year: Optional[int] = Field(None, ge=1900, le=9999)
    month: Optional[int] = Field(None, ge=1, le=12)
    start: Optional[date] = None
    end: Optional[date] = None

    @model_validator(mode="after")
    def check_required_fields(self):
        if self.kind == "monthly" and (self.year is None or self.month is None):
            raise ValueError("Year and month are required for monthly periods.")
        if self.kind == "yearly" and self.year is None:
            raise ValueError("Year is required for yearly periods.")
        if self.kind == "custom" and self.start is None:
            raise ValueError("A start date is required for custom periods.")
        if self.kind == "custom" and self.end is not None and self.end < self.start:
            raise ValueError("The end date cannot be before the start date.")
        return self

    def bounds(self):
        """(first_day, last_day) of the window, or (None, None) for all time."""
        if self.kind == "monthly":
            last = calendar.monthrange(self.year, self.month)[1]
            return date(self.year, self.month, 1), date(self.year, self.month, last)
        if self.kind == "yearly":
            return date(self.year, 1, 1), date(self.year, 12, 31)
        if self.kind == "custom":
            return self.start, self.end or self.start
        return None, None

    def contains(self, day: date) -> bool:
        first, last = self.bounds()
        if first is None:
            return True
        return first <= day <= last


class GroupSummary(BaseModel):
    """Group-wide totals over contributing members' transactions."""
    total_deposits: Decimal
    total_loan: Decimal
    total_repayment_principal: Decimal
    total_interest: Decimal
    total_expenses: Decimal
    total_loan_waived: Decimal
    outstanding_loan: Decimal
    remaining_fund: Decimal
    contributing_members: int
    transaction_count: int


class MonthlyOverview(BaseModel):
    """Totals of one calendar month plus who took part."""
    year: Optional[int] = None
    month: Optional[int] = None
    total_interest: Decimal = Decimal("0.00")
    total_deposit: Decimal = Decimal("0.00")
    deposit_members: List[str] = Field(default_factory=list)
    total_loan: Decimal = Decimal("0.00")
    loan_takers: List[str] = Field(default_factory=list)
    total_repayment: Decimal = Decimal("0.00")
    loan_repayers: List[str] = Field(default_factory=list)


class IntegrityIssue(BaseModel):
    kind: Literal["orphaned_repayment", "unknown_member"]
    transaction_id: str
    member_id: Optional[str] = None
    loan_id: Optional[str] = None
    message: str
