from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from datetime import date as date_type
from decimal import Decimal
from shg.models.transaction import TransactionType, LoanStatus


class TransactionCreate(BaseModel):
    """New transaction. Repayments carry loan_id, principal and interest;
    amount may be omitted for them and defaults to principal + interest."""
    member_id: str
    type: TransactionType
    amount: Optional[Decimal] = None
    date: date
    description: Optional[str] = None
    principal: Optional[Decimal] = None
    interest: Optional[Decimal] = None
    loan_id: Optional[str] = None
    interest_rate: Optional[Decimal] = None


class TransactionUpdate(BaseModel):
    amount: Optional[Decimal] = None
    date: Optional[date_type] = None  # field name shadows the type
    description: Optional[str] = None
    principal: Optional[Decimal] = None
    interest: Optional[Decimal] = None
    loan_id: Optional[str] = None
    interest_rate: Optional[Decimal] = None


class TransactionResponse(BaseModel):
    id: str
    member_id: str
    type: TransactionType
    amount: Decimal
    date: date
    description: Optional[str] = None
    principal: Optional[Decimal] = None
    interest: Optional[Decimal] = None
    loan_id: Optional[str] = None
    status: Optional[LoanStatus] = None
    interest_rate: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoanStatusChangeResponse(BaseModel):
    loan_id: str
    previous_status: Optional[LoanStatus] = None
    status: LoanStatus
    principal_repaid: Decimal
    reopened: bool

    class Config:
        from_attributes = True


class TransactionWriteResponse(BaseModel):
    """Result of a create, edit or delete, with any loan status changes.
    `reopened_loans` lists loans that moved from closed back to active."""
    transaction: Optional[TransactionResponse] = None
    loan_status_changes: List[LoanStatusChangeResponse] = Field(default_factory=list)
    reopened_loans: List[str] = Field(default_factory=list)


class BulkDepositRequest(BaseModel):
    member_ids: List[str] = Field(..., min_length=1)
    amount: Decimal
    date: date
    description: Optional[str] = None


class BulkDepositChunk(BaseModel):
    index: int
    member_ids: List[str]
    committed: bool
    error: Optional[str] = None

    class Config:
        from_attributes = True


class BulkDepositResponse(BaseModel):
    recorded: int
    failed: int
    chunks: List[BulkDepositChunk]
