"""
Seed demo data: group settings and a small roster with a few transactions.

Run `alembic upgrade head` first. Seeding is skipped for members that
already exist.
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from shg.core.config import settings
from shg.db.base import SessionLocal
from shg.models.member import MemberStatus
from shg.models.transaction import TransactionType
from shg.services.group import update_group_settings
from shg.services.member import create_member, change_member_status
from shg.services.store import find_member
from shg.services.transaction import add_transaction
from decimal import Decimal
from datetime import date


DEMO_MEMBERS = [
    {"member_id": "M-1", "name": "Asha Devi", "phone": "9876500001", "aadhaar": "1111-2222-3333"},
    {"member_id": "M-2", "name": "Bina Kumari", "phone": "9876500002", "aadhaar": "2222-3333-4444"},
    {"member_id": "M-3", "name": "Chitra Rao", "phone": "9876500003", "aadhaar": "3333-4444-5555"},
]


def seed_group_settings(db, group_id):
    """Seed group configuration."""
    print("Seeding group settings...")
    update_group_settings(
        db,
        group_id,
        group_name="Demo Self-Help Group",
        monthly_contribution=Decimal("500.00"),
        interest_rate=Decimal("2.00"),
        established_date=date(2024, 1, 1),
    )
    print("Group settings seeded")


def seed_members(db, group_id):
    """Seed the demo roster and its opening transactions."""
    print("Seeding members...")
    created = []
    for member_data in DEMO_MEMBERS:
        if find_member(db, group_id, member_data["member_id"]):
            continue
        create_member(db, group_id, join_date=date(2024, 1, 1), created_by="seed", **member_data)
        created.append(member_data["member_id"])

    if "M-1" in created and "M-2" in created:
        add_transaction(db, group_id, "M-1", TransactionType.DEPOSIT, Decimal("1000"), date(2024, 1, 5))
        add_transaction(db, group_id, "M-2", TransactionType.DEPOSIT, Decimal("2000"), date(2024, 1, 5))
        loan = add_transaction(db, group_id, "M-1", TransactionType.LOAN, Decimal("500"), date(2024, 1, 10)).transaction
        add_transaction(
            db, group_id, "M-1", TransactionType.REPAYMENT, None, date(2024, 2, 10),
            principal=Decimal("500"), interest=Decimal("50"), loan_id=loan.id,
        )
    if "M-3" in created:
        change_member_status(db, group_id, "M-3", MemberStatus.INACTIVE, changed_by="seed", reason="Demo inactive member")

    print(f"Members seeded: {', '.join(created) or 'none (already present)'}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed demo group settings and members")
    parser.add_argument("--group", default=settings.VIEWING_USER_ID or "demo", help="Group (viewing user) id to seed")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        seed_group_settings(db, args.group)
        seed_members(db, args.group)
        print("\nSeed data complete!")
    except Exception as e:
        db.rollback()
        print(f"Error seeding data: {e}")
        raise
    finally:
        db.close()
