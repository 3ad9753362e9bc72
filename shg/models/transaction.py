from sqlalchemy import Column, String, Date, DateTime, Numeric, Enum as SQLEnum, Text, Index, text, func
import uuid
from shg.db.base import Base
import enum


class TransactionType(str, enum.Enum):
    """Transaction type."""
    DEPOSIT = "deposit"
    LOAN = "loan"
    REPAYMENT = "repayment"
    EXPENSE = "expense"
    LOAN_WAIVED = "loan-waived"


class LoanStatus(str, enum.Enum):
    """Loan status, derived from repayments."""
    ACTIVE = "active"
    CLOSED = "closed"


def new_transaction_id() -> str:
    return str(uuid.uuid4())


class Transaction(Base):
    """One money movement of a group.

    For repayments `amount` is the total paid (principal + interest).
    `loan_id` equals the row id on loans and points at the loan on
    repayments. `status` and `interest_rate` are only set on loans.
    """
    __tablename__ = "transaction"

    id = Column(String(36), primary_key=True, default=new_transaction_id)
    group_id = Column(String(64), nullable=False, index=True)
    member_id = Column(String(50), nullable=False, index=True)  # no FK: dangling ids read as "Unknown"
    type = Column(SQLEnum(TransactionType, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    principal = Column(Numeric(12, 2), nullable=True)
    interest = Column(Numeric(12, 2), nullable=True)
    loan_id = Column(String(36), nullable=True, index=True)
    status = Column(SQLEnum(LoanStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=True)
    interest_rate = Column(Numeric(5, 2), nullable=True)  # informational only
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    __table_args__ = (
        Index("idx_transaction_group_member", "group_id", "member_id"),
    )

    def __repr__(self):
        return f"<Transaction {self.type} member={self.member_id} amount={self.amount}>"
