import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from shg.core.audit import write_audit_log
from shg.core.config import settings
from shg.core.exceptions import ValidationError, StoreError, report_integrity_issue
from shg.db.base import unit_of_work
from shg.models.transaction import Transaction, TransactionType
from shg.schemas.summary import PeriodFilter
from shg.services.accounting import ZERO, to_decimal
from shg.services.loan import (
    LoanStatusChange,
    delete_repayment,
    edit_repayment,
    record_loan,
    record_repayment,
    recompute_loan_status,
)
from shg.services.member import require_active_member
from shg.services.store import find_loan, get_transaction, list_loan_repayments

logger = logging.getLogger(__name__)

DEFAULT_BULK_DESCRIPTION = "Monthly contribution"


@dataclass
class TransactionResult:
    transaction: Optional[Transaction]
    status_changes: List[LoanStatusChange] = field(default_factory=list)

    @property
    def reopened_loans(self) -> List[str]:
        return [c.loan_id for c in self.status_changes if c.reopened]


def add_transaction(
    db: Session,
    group_id: str,
    member_id: str,
    tx_type: TransactionType,
    amount,
    tx_date: date,
    description: str = None,
    principal=None,
    interest=None,
    loan_id: str = None,
    interest_rate=None
) -> TransactionResult:
    """Record one transaction.

    Loans and repayments go through the loan lifecycle so the loan status is
    kept in step; other types are plain appends.
    """
    tx_type = TransactionType(tx_type)

    if tx_type == TransactionType.LOAN:
        loan = record_loan(db, group_id, member_id, amount, tx_date, description, interest_rate)
        return TransactionResult(transaction=loan)

    if tx_type == TransactionType.REPAYMENT:
        if not loan_id:
            raise ValidationError("A repayment must reference a loan")
        loan = find_loan(db, group_id, loan_id)
        if loan is not None and member_id and loan.member_id != member_id:
            raise ValidationError(f"Loan {loan_id} belongs to a different member")
        result = record_repayment(
            db, group_id, loan_id, principal, interest, tx_date,
            amount=amount, description=description,
        )
        return TransactionResult(transaction=result.repayment, status_changes=result.status_changes)

    amount = to_decimal(amount)
    if amount <= ZERO:
        raise ValidationError("Amount must be a positive number.")
    require_active_member(db, group_id, member_id)

    tx = Transaction(
        group_id=group_id,
        member_id=member_id,
        type=tx_type,
        amount=amount,
        date=tx_date,
        description=description,
    )
    with unit_of_work(db, f"record {tx_type.value} for member {member_id}"):
        db.add(tx)
    db.refresh(tx)
    logger.info(f"{tx_type.value} of {amount} recorded for member {member_id}")
    return TransactionResult(transaction=tx)


def edit_transaction(
    db: Session,
    group_id: str,
    transaction_id: str,
    amount=None,
    tx_date: date = None,
    description: str = None,
    principal=None,
    interest=None,
    loan_id: str = None,
    interest_rate=None
) -> TransactionResult:
    """Edit amount, date or description (and the split of a repayment).

    The type and member of a transaction never change.
    """
    tx = get_transaction(db, group_id, transaction_id)

    if tx.type == TransactionType.REPAYMENT:
        result = edit_repayment(
            db, group_id, transaction_id,
            principal=principal if principal is not None else tx.principal,
            interest=interest if interest is not None else tx.interest,
            amount=amount,
            repayment_date=tx_date,
            description=description,
            loan_id=loan_id,
        )
        return TransactionResult(transaction=result.repayment, status_changes=result.status_changes)

    if amount is not None and to_decimal(amount) <= ZERO:
        raise ValidationError("Amount must be a positive number.")

    changes = []
    with unit_of_work(db, f"edit transaction {transaction_id}"):
        if amount is not None:
            tx.amount = to_decimal(amount)
        if tx_date is not None:
            tx.date = tx_date
        if description is not None:
            tx.description = description
        if tx.type == TransactionType.LOAN:
            if interest_rate is not None:
                tx.interest_rate = to_decimal(interest_rate)
            # the closing threshold is the loan amount
            change = recompute_loan_status(db, group_id, tx.loan_id or tx.id)
            if change:
                changes.append(change)

    db.refresh(tx)
    return TransactionResult(transaction=tx, status_changes=changes)


def delete_transaction(
    db: Session,
    group_id: str,
    transaction_id: str,
    deleted_by: str = None
) -> TransactionResult:
    """Delete one transaction.

    Deleting a repayment may reopen its loan. Deleting a loan that still has
    repayments leaves them orphaned, which is reported as an integrity
    warning.
    """
    tx = get_transaction(db, group_id, transaction_id)
    details = f"{group_id}: {tx.type.value} {transaction_id} member={tx.member_id} amount={tx.amount}"

    if tx.type == TransactionType.REPAYMENT:
        result = delete_repayment(db, group_id, transaction_id)
        write_audit_log(deleted_by, "transaction_delete", details)
        return TransactionResult(transaction=None, status_changes=result.status_changes)

    orphaned = []
    if tx.type == TransactionType.LOAN:
        orphaned = list_loan_repayments(db, group_id, tx.loan_id or tx.id)

    with unit_of_work(db, f"delete transaction {transaction_id}"):
        db.delete(tx)

    if orphaned:
        report_integrity_issue(
            logger,
            f"Loan {transaction_id} deleted while {len(orphaned)} repayment(s) still reference it"
        )
    write_audit_log(deleted_by, "transaction_delete", details)
    return TransactionResult(transaction=None)


@dataclass
class ChunkResult:
    index: int
    member_ids: List[str]
    committed: bool
    error: Optional[str] = None


@dataclass
class BulkDepositResult:
    chunks: List[ChunkResult] = field(default_factory=list)

    @property
    def recorded_member_ids(self) -> List[str]:
        return [m for c in self.chunks if c.committed for m in c.member_ids]

    @property
    def failed_member_ids(self) -> List[str]:
        return [m for c in self.chunks if not c.committed for m in c.member_ids]

    @property
    def succeeded(self) -> bool:
        return all(c.committed for c in self.chunks)


def bulk_deposit(
    db: Session,
    group_id: str,
    member_ids: Iterable[str],
    amount,
    deposit_date: date,
    description: str = None,
    chunk_size: int = None
) -> BulkDepositResult:
    """Record the same deposit for many active members.

    Writes are grouped into chunks that each commit on their own. A failed
    chunk is rolled back and reported; chunks already committed stay.
    """
    member_ids = list(dict.fromkeys(member_ids))
    amount = to_decimal(amount)
    chunk_size = chunk_size or settings.BULK_DEPOSIT_CHUNK_SIZE

    if amount <= ZERO:
        raise ValidationError("Amount must be a positive number.")
    if not member_ids:
        raise ValidationError("Please select at least one member.")
    if chunk_size < 1:
        raise ValidationError("Chunk size must be at least 1")
    for member_id in member_ids:
        require_active_member(db, group_id, member_id)

    result = BulkDepositResult()
    for index, start in enumerate(range(0, len(member_ids), chunk_size)):
        chunk = member_ids[start:start + chunk_size]
        try:
            with unit_of_work(db, f"record bulk deposit chunk {index}"):
                for member_id in chunk:
                    db.add(Transaction(
                        group_id=group_id,
                        member_id=member_id,
                        type=TransactionType.DEPOSIT,
                        amount=amount,
                        date=deposit_date,
                        description=description or DEFAULT_BULK_DESCRIPTION,
                    ))
        except StoreError as e:
            logger.error(f"Bulk deposit chunk {index} failed for {len(chunk)} members: {e}")
            result.chunks.append(ChunkResult(index=index, member_ids=chunk, committed=False, error=str(e)))
            continue
        result.chunks.append(ChunkResult(index=index, member_ids=chunk, committed=True))

    logger.info(
        f"Bulk deposit of {amount} recorded for {len(result.recorded_member_ids)} members, "
        f"{len(result.failed_member_ids)} failed"
    )
    return result


def filter_transactions(
    transactions: Iterable,
    members: Iterable,
    period: Optional[PeriodFilter] = None,
    tx_type: Optional[TransactionType] = None,
    query: Optional[str] = None
) -> List:
    """Newest-first listing, filtered by period, type and a search over
    member name and description."""
    names = {m.id: m.name for m in members}
    selected = sorted(transactions, key=lambda tx: tx.date, reverse=True)

    if tx_type is not None:
        selected = [tx for tx in selected if tx.type == tx_type]
    if period is not None:
        selected = [tx for tx in selected if period.contains(tx.date)]
    if query:
        lowered = query.lower()
        selected = [
            tx for tx in selected
            if lowered in names.get(tx.member_id, "").lower()
            or (tx.description and lowered in tx.description.lower())
        ]
    return selected
