from sqlalchemy import Column, String, Date, DateTime, Enum as SQLEnum, Text, Uuid, Index, text
import uuid
from shg.db.base import Base
import enum


class MemberStatus(str, enum.Enum):
    """Member status enum."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    CLOSED = "closed"  # terminal


# Statuses whose transactions count towards group totals and interest
CONTRIBUTING_STATUSES = (MemberStatus.ACTIVE, MemberStatus.CLOSED)


class Member(Base):
    """Group member.

    The id is assigned by the group (e.g. "M-1"), not generated. Balances are
    never stored here; they are derived from transactions on every read.
    """
    __tablename__ = "member"

    group_id = Column(String(64), primary_key=True)
    id = Column(String(50), primary_key=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    aadhaar = Column(String(12), nullable=False)  # stored without dashes
    join_date = Column(Date, nullable=False)
    status = Column(SQLEnum(MemberStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=MemberStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    @property
    def is_contributing(self) -> bool:
        return self.status in CONTRIBUTING_STATUSES


class MemberStatusHistory(Base):
    """Audit trail for member status changes."""
    __tablename__ = "member_status_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(String(64), nullable=False)
    member_id = Column(String(50), nullable=False)
    old_status = Column(SQLEnum(MemberStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=True)
    new_status = Column(SQLEnum(MemberStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    changed_by = Column(String(64), nullable=True)
    changed_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    reason = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_member_status_history_member", "group_id", "member_id"),
    )
