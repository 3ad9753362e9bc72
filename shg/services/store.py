"""Read access to a group's transactions and members.

Every read is a full-collection snapshot; the ledger functions recompute from
whatever snapshot they are handed.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shg.core.exceptions import NotFoundError, StoreError
from shg.models.member import Member
from shg.models.transaction import Transaction, TransactionType

logger = logging.getLogger(__name__)


def _read(query, what: str):
    try:
        return query.all()
    except SQLAlchemyError as e:
        logger.error(f"Store failure while reading {what}: {e}")
        raise StoreError(f"Failed to read {what}") from e


def list_transactions(db: Session, group_id: str) -> List[Transaction]:
    """All transactions of a group."""
    return _read(
        db.query(Transaction).filter(Transaction.group_id == group_id),
        "transactions",
    )


def list_members(db: Session, group_id: str) -> List[Member]:
    """All members of a group, whatever their status."""
    return _read(
        db.query(Member).filter(Member.group_id == group_id).order_by(Member.id),
        "members",
    )


def list_member_transactions(db: Session, group_id: str, member_id: str) -> List[Transaction]:
    return _read(
        db.query(Transaction).filter(
            Transaction.group_id == group_id,
            Transaction.member_id == member_id,
        ),
        f"transactions of member {member_id}",
    )


def list_loan_repayments(db: Session, group_id: str, loan_id: str) -> List[Transaction]:
    """Repayments referencing `loan_id`."""
    return _read(
        db.query(Transaction).filter(
            Transaction.group_id == group_id,
            Transaction.type == TransactionType.REPAYMENT,
            Transaction.loan_id == loan_id,
        ),
        f"repayments of loan {loan_id}",
    )


def find_member(db: Session, group_id: str, member_id: str) -> Optional[Member]:
    try:
        return db.get(Member, (group_id, member_id))
    except SQLAlchemyError as e:
        logger.error(f"Store failure while reading member {member_id}: {e}")
        raise StoreError(f"Failed to read member {member_id}") from e


def get_member(db: Session, group_id: str, member_id: str) -> Member:
    member = find_member(db, group_id, member_id)
    if member is None:
        raise NotFoundError(f"Member {member_id} not found")
    return member


def find_transaction(db: Session, group_id: str, transaction_id: str) -> Optional[Transaction]:
    try:
        tx = db.get(Transaction, transaction_id)
    except SQLAlchemyError as e:
        logger.error(f"Store failure while reading transaction {transaction_id}: {e}")
        raise StoreError(f"Failed to read transaction {transaction_id}") from e
    if tx is None or tx.group_id != group_id:
        return None
    return tx


def get_transaction(db: Session, group_id: str, transaction_id: str) -> Transaction:
    tx = find_transaction(db, group_id, transaction_id)
    if tx is None:
        raise NotFoundError(f"Transaction {transaction_id} not found")
    return tx


def find_loan(db: Session, group_id: str, loan_id: str) -> Optional[Transaction]:
    """The loan transaction identified by `loan_id`, or None if it is gone."""
    tx = find_transaction(db, group_id, loan_id)
    if tx is None or tx.type != TransactionType.LOAN:
        return None
    return tx
