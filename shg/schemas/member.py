from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from shg.models.member import MemberStatus
from shg.schemas.transaction import TransactionResponse


class MemberCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    aadhaar: str
    join_date: date


class MemberUpdate(BaseModel):
    """Partial update. Setting `new_id` renames the member and moves their
    transactions with them."""
    new_id: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=20)
    aadhaar: Optional[str] = None
    join_date: Optional[date] = None


class MemberStatusUpdate(BaseModel):
    status: MemberStatus
    reason: Optional[str] = None


class MemberResponse(BaseModel):
    id: str
    name: str
    phone: str
    aadhaar: str
    join_date: date
    status: MemberStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberWithBalance(MemberResponse):
    deposit_balance: Decimal
    loan_balance: Decimal


class MemberDeleteResponse(BaseModel):
    message: str
    deleted_transactions: int


class PassbookResponse(BaseModel):
    member: MemberResponse
    deposit_balance: Decimal
    loan_balance: Decimal
    interest_share: Decimal
    grand_total: Decimal
    transactions: List[TransactionResponse]
