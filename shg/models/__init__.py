from shg.db.base import Base

# Import all models so Alembic can detect them
from shg.models.member import Member, MemberStatus, MemberStatusHistory
from shg.models.transaction import Transaction, TransactionType, LoanStatus
from shg.models.system import GroupSettings

__all__ = [
    "Base",
    "Member",
    "MemberStatus",
    "MemberStatusHistory",
    "Transaction",
    "TransactionType",
    "LoanStatus",
    "GroupSettings",
]
