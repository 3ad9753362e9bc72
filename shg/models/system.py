from sqlalchemy import Column, String, Date, DateTime, Numeric, text, func
from shg.db.base import Base


class GroupSettings(Base):
    """Group configuration. Holds no running totals; those are always derived."""
    __tablename__ = "group_settings"

    group_id = Column(String(64), primary_key=True)
    group_name = Column(String(100), nullable=False)
    monthly_contribution = Column(Numeric(12, 2), nullable=True)
    interest_rate = Column(Numeric(5, 2), nullable=True)  # nominal, informational
    established_date = Column(Date, nullable=True)
    updated_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now())
