import logging
import re
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from shg.core.audit import write_audit_log
from shg.core.exceptions import ValidationError
from shg.db.base import unit_of_work
from shg.models.member import Member, MemberStatus, MemberStatusHistory
from shg.models.transaction import Transaction
from shg.services.accounting import MemberBalance, compute_balances, get_member_balance, ZERO
from shg.services.store import (
    find_member,
    get_member,
    list_member_transactions,
    list_members,
    list_transactions,
)

logger = logging.getLogger(__name__)

AADHAAR_PATTERN = re.compile(r"^\d{4}-?\d{4}-?\d{4}$")


def normalize_aadhaar(value: str) -> str:
    """Validate a 12-digit Aadhaar number and strip its dashes for storage."""
    value = (value or "").strip()
    if not AADHAAR_PATTERN.match(value):
        raise ValidationError("Aadhaar must be 12 digits.")
    return value.replace("-", "")


def format_aadhaar(value: str) -> str:
    """Render a stored Aadhaar number as XXXX-XXXX-XXXX."""
    digits = (value or "").replace("-", "")
    if len(digits) != 12:
        return value
    return f"{digits[:4]}-{digits[4:8]}-{digits[8:]}"


def search_members(members: Iterable[Member], query: Optional[str]) -> List[Member]:
    """Filter members by name, id, phone or Aadhaar (dashes ignored)."""
    members = list(members)
    if not query:
        return members
    lowered = query.lower()
    digits = query.replace("-", "")
    return [
        m for m in members
        if lowered in m.name.lower()
        or lowered in m.id.lower()
        or query in m.phone
        or digits in m.aadhaar
    ]


def require_active_member(db: Session, group_id: str, member_id: str) -> Member:
    """Members must exist and be active to receive new transactions."""
    member = get_member(db, group_id, member_id)
    if member.status != MemberStatus.ACTIVE:
        raise ValidationError(
            f"Member {member_id} is {member.status.value}; transactions can only be recorded for active members"
        )
    return member


def get_member_loan_balance(db: Session, group_id: str, member_id: str):
    """Outstanding loan balance of a member, derived from their transactions."""
    return get_member_balance(list_member_transactions(db, group_id, member_id), member_id).loan_balance


def list_members_with_balances(
    db: Session,
    group_id: str,
    query: Optional[str] = None
) -> List[Tuple[Member, MemberBalance]]:
    """Members of the group (optionally searched) with their derived balances."""
    members = search_members(list_members(db, group_id), query)
    balances = compute_balances(list_transactions(db, group_id))
    return [(m, balances.get(m.id, MemberBalance())) for m in members]


def create_member(
    db: Session,
    group_id: str,
    member_id: str,
    name: str,
    phone: str,
    aadhaar: str,
    join_date: date,
    created_by: str = None
) -> Member:
    """Register a new member. New members start active."""
    member_id = (member_id or "").strip()
    if not member_id:
        raise ValidationError("Member ID is required")
    if find_member(db, group_id, member_id):
        raise ValidationError(f"Member ID {member_id} already exists")

    member = Member(
        group_id=group_id,
        id=member_id,
        name=name,
        phone=phone,
        aadhaar=normalize_aadhaar(aadhaar),
        join_date=join_date,
        status=MemberStatus.ACTIVE,
    )
    with unit_of_work(db, f"create member {member_id}"):
        db.add(member)
        db.add(MemberStatusHistory(
            group_id=group_id,
            member_id=member_id,
            old_status=None,
            new_status=MemberStatus.ACTIVE,
            changed_by=created_by,
        ))
    db.refresh(member)
    logger.info(f"Member {member_id} created in group {group_id}")
    return member


def update_member(
    db: Session,
    group_id: str,
    member_id: str,
    name: str = None,
    phone: str = None,
    aadhaar: str = None,
    join_date: date = None,
    new_id: str = None,
    updated_by: str = None
) -> Member:
    """Edit a member's details.

    Changing the id moves every transaction (and status history row) of the
    member to the new id in the same commit, so derived balances are
    unchanged. Closed members cannot be edited.
    """
    member = get_member(db, group_id, member_id)
    if member.status == MemberStatus.CLOSED:
        raise ValidationError(f"Member {member_id} is closed and cannot be edited")

    name = name if name is not None else member.name
    phone = phone if phone is not None else member.phone
    aadhaar = normalize_aadhaar(aadhaar) if aadhaar is not None else member.aadhaar
    join_date = join_date if join_date is not None else member.join_date
    new_id = (new_id or "").strip() or member_id

    if new_id == member_id:
        with unit_of_work(db, f"update member {member_id}"):
            member.name = name
            member.phone = phone
            member.aadhaar = aadhaar
            member.join_date = join_date
        db.refresh(member)
        return member

    if find_member(db, group_id, new_id):
        raise ValidationError(f"Member ID {new_id} already exists")

    renamed = Member(
        group_id=group_id,
        id=new_id,
        name=name,
        phone=phone,
        aadhaar=aadhaar,
        join_date=join_date,
        status=member.status,
        created_at=member.created_at,
    )
    with unit_of_work(db, f"change member id {member_id} to {new_id}"):
        db.add(renamed)
        moved = db.query(Transaction).filter(
            Transaction.group_id == group_id,
            Transaction.member_id == member_id,
        ).update({Transaction.member_id: new_id}, synchronize_session=False)
        db.query(MemberStatusHistory).filter(
            MemberStatusHistory.group_id == group_id,
            MemberStatusHistory.member_id == member_id,
        ).update({MemberStatusHistory.member_id: new_id}, synchronize_session=False)
        db.delete(member)

    db.expire_all()
    logger.info(f"Member {member_id} renamed to {new_id}; {moved} transactions migrated")
    write_audit_log(updated_by, "member_id_change", f"{group_id}: {member_id} -> {new_id} ({moved} transactions)")
    return get_member(db, group_id, new_id)


def change_member_status(
    db: Session,
    group_id: str,
    member_id: str,
    new_status: MemberStatus,
    changed_by: str = None,
    reason: str = None
) -> Member:
    """Move a member between active and inactive, or close the account.

    Closing is one-way and requires a zero loan balance.
    """
    new_status = MemberStatus(new_status)
    member = get_member(db, group_id, member_id)
    old_status = member.status

    if old_status == MemberStatus.CLOSED:
        raise ValidationError(f"Member {member_id} is closed; a closed account cannot change status")
    if old_status == new_status:
        return member

    if new_status == MemberStatus.CLOSED:
        loan_balance = get_member_loan_balance(db, group_id, member_id)
        if loan_balance != ZERO:
            raise ValidationError(
                f"{member.name} has an outstanding loan balance of {loan_balance}. "
                f"Please clear all loans before closing the account."
            )

    with unit_of_work(db, f"change status of member {member_id}"):
        member.status = new_status
        db.add(MemberStatusHistory(
            group_id=group_id,
            member_id=member_id,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
            reason=reason,
        ))

    db.refresh(member)
    logger.info(f"Member {member_id} status {old_status.value} -> {new_status.value}")
    write_audit_log(changed_by, "member_status", f"{group_id}: {member_id} {old_status.value} -> {new_status.value}")
    return member


def delete_member(
    db: Session,
    group_id: str,
    member_id: str,
    deleted_by: str = None
) -> int:
    """Delete a member together with all of their transactions.

    Only allowed when the member's derived loan balance is zero; closed
    members are kept for history. Returns the number of deleted transactions.
    """
    member = get_member(db, group_id, member_id)
    if member.status == MemberStatus.CLOSED:
        raise ValidationError(f"Member {member_id} is closed and cannot be deleted")

    transactions = list_member_transactions(db, group_id, member_id)
    loan_balance = get_member_balance(transactions, member_id).loan_balance
    if loan_balance != ZERO:
        raise ValidationError(
            f"{member.name} has an outstanding loan balance of {loan_balance}. "
            f"Please clear the loan before deleting the member."
        )

    with unit_of_work(db, f"delete member {member_id}"):
        for tx in transactions:
            db.delete(tx)
        db.query(MemberStatusHistory).filter(
            MemberStatusHistory.group_id == group_id,
            MemberStatusHistory.member_id == member_id,
        ).delete(synchronize_session=False)
        db.delete(member)

    logger.info(f"Member {member_id} deleted with {len(transactions)} transactions")
    write_audit_log(deleted_by, "member_delete", f"{group_id}: {member_id} ({len(transactions)} transactions)")
    return len(transactions)
