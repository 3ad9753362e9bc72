"""Loan lifecycle.

A loan's status is a pure function of its amount and the principal of the
repayments that reference it:

    closed  iff  sum(repayment.principal) >= loan.amount
    active  otherwise

The status is recomputed from scratch after every repayment create, edit or
delete. A recompute that moves a loan from closed back to active is a
"reopen" and is reported to the caller.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from shg.core.exceptions import ValidationError, NotFoundError, report_integrity_issue
from shg.db.base import unit_of_work
from shg.models.transaction import Transaction, TransactionType, LoanStatus, new_transaction_id
from shg.services.accounting import ZERO, to_decimal
from shg.services.member import require_active_member
from shg.services.store import find_loan, get_transaction, list_loan_repayments, list_transactions

logger = logging.getLogger(__name__)


@dataclass
class LoanStatusChange:
    loan_id: str
    previous_status: Optional[LoanStatus]
    status: LoanStatus
    principal_repaid: Decimal = ZERO

    @property
    def changed(self) -> bool:
        return self.previous_status != self.status

    @property
    def reopened(self) -> bool:
        return self.previous_status == LoanStatus.CLOSED and self.status == LoanStatus.ACTIVE


@dataclass
class RepaymentResult:
    """Outcome of a repayment write and the loan recomputes it triggered."""
    repayment: Optional[Transaction]
    status_changes: List[LoanStatusChange] = field(default_factory=list)

    @property
    def reopened_loans(self) -> List[str]:
        return [c.loan_id for c in self.status_changes if c.reopened]

    @property
    def closed_loans(self) -> List[str]:
        return [c.loan_id for c in self.status_changes if c.changed and c.status == LoanStatus.CLOSED]


def principal_repaid(repayments: Iterable) -> Decimal:
    return sum((to_decimal(r.principal) for r in repayments), ZERO)


def derive_loan_status(loan_amount, repayments: Iterable) -> LoanStatus:
    """Status of a loan given every repayment referencing it."""
    if principal_repaid(repayments) >= to_decimal(loan_amount):
        return LoanStatus.CLOSED
    return LoanStatus.ACTIVE


def derive_loan_statuses(transactions: Iterable) -> Dict[str, LoanStatus]:
    """Status of every loan in a transaction snapshot, keyed by loan id."""
    transactions = list(transactions)
    repaid: Dict[str, Decimal] = {}
    for tx in transactions:
        if tx.type == TransactionType.REPAYMENT and tx.loan_id:
            repaid[tx.loan_id] = repaid.get(tx.loan_id, ZERO) + to_decimal(tx.principal)

    statuses = {}
    for tx in transactions:
        if tx.type == TransactionType.LOAN:
            loan_id = tx.loan_id or tx.id
            paid = repaid.get(loan_id, ZERO)
            statuses[loan_id] = LoanStatus.CLOSED if paid >= to_decimal(tx.amount) else LoanStatus.ACTIVE
    return statuses


def find_orphaned_repayments(transactions: Iterable) -> List:
    """Repayments whose loan id matches no loan transaction in the snapshot."""
    transactions = list(transactions)
    loan_ids = {tx.loan_id or tx.id for tx in transactions if tx.type == TransactionType.LOAN}
    return [
        tx for tx in transactions
        if tx.type == TransactionType.REPAYMENT and tx.loan_id not in loan_ids
    ]


def recompute_loan_status(db: Session, group_id: str, loan_id: str) -> Optional[LoanStatusChange]:
    """Re-derive and set the status of one loan inside the caller's unit of work.

    Returns None when the loan no longer exists; the repayments pointing at
    it stay valid on their own and the anomaly is reported as a warning.
    """
    loan = find_loan(db, group_id, loan_id)
    if loan is None:
        report_integrity_issue(
            logger,
            f"Repayment references loan {loan_id} which does not exist in group {group_id}; status not recomputed"
        )
        return None

    db.flush()
    repayments = list_loan_repayments(db, group_id, loan_id)
    change = LoanStatusChange(
        loan_id=loan_id,
        previous_status=loan.status,
        status=derive_loan_status(loan.amount, repayments),
        principal_repaid=principal_repaid(repayments),
    )
    loan.status = change.status

    if change.reopened:
        logger.info(f"Loan {loan_id} reopened: principal repaid {change.principal_repaid} < {loan.amount}")
    elif change.changed:
        logger.info(f"Loan {loan_id} status {change.previous_status} -> {change.status.value}")
    return change


def _validate_split(principal, interest, amount=None):
    principal = to_decimal(principal)
    interest = to_decimal(interest)
    if principal < ZERO or interest < ZERO:
        raise ValidationError("Principal and interest cannot be negative")
    total = principal + interest
    if total <= ZERO:
        raise ValidationError("Repayment amount must be greater than 0")
    if amount is not None and to_decimal(amount) != total:
        raise ValidationError("For repayments, Principal + Interest must equal the Total Amount.")
    return principal, interest, total


def record_loan(
    db: Session,
    group_id: str,
    member_id: str,
    amount,
    loan_date: date,
    description: str = None,
    interest_rate=None
) -> Transaction:
    """Disburse a loan. The loan's id doubles as its loan_id."""
    amount = to_decimal(amount)
    if amount <= ZERO:
        raise ValidationError("Loan amount must be greater than 0")
    require_active_member(db, group_id, member_id)

    loan_id = new_transaction_id()
    loan = Transaction(
        id=loan_id,
        group_id=group_id,
        member_id=member_id,
        type=TransactionType.LOAN,
        amount=amount,
        date=loan_date,
        description=description,
        loan_id=loan_id,
        status=LoanStatus.ACTIVE,
        interest_rate=to_decimal(interest_rate) if interest_rate is not None else None,
    )
    with unit_of_work(db, f"record loan for member {member_id}"):
        db.add(loan)
    db.refresh(loan)
    logger.info(f"Loan {loan_id} of {amount} recorded for member {member_id}")
    return loan


def record_repayment(
    db: Session,
    group_id: str,
    loan_id: str,
    principal,
    interest,
    repayment_date: date,
    amount=None,
    description: str = None
) -> RepaymentResult:
    """Record a repayment against a loan and re-derive the loan's status.

    `amount` defaults to principal + interest; when given it must equal it.
    """
    principal, interest, total = _validate_split(principal, interest, amount)

    loan = find_loan(db, group_id, loan_id)
    if loan is None:
        raise NotFoundError(f"Loan {loan_id} not found")
    require_active_member(db, group_id, loan.member_id)

    repayment = Transaction(
        group_id=group_id,
        member_id=loan.member_id,
        type=TransactionType.REPAYMENT,
        amount=total,
        date=repayment_date,
        description=description,
        principal=principal,
        interest=interest,
        loan_id=loan_id,
    )
    with unit_of_work(db, f"record repayment for loan {loan_id}"):
        db.add(repayment)
        change = recompute_loan_status(db, group_id, loan_id)

    db.refresh(repayment)
    return RepaymentResult(repayment=repayment, status_changes=[c for c in [change] if c])


def _get_repayment(db: Session, group_id: str, repayment_id: str) -> Transaction:
    repayment = get_transaction(db, group_id, repayment_id)
    if repayment.type != TransactionType.REPAYMENT:
        raise ValidationError(f"Transaction {repayment_id} is not a repayment")
    return repayment


def edit_repayment(
    db: Session,
    group_id: str,
    repayment_id: str,
    principal,
    interest,
    amount=None,
    repayment_date: date = None,
    description: str = None,
    loan_id: str = None
) -> RepaymentResult:
    """Change a repayment's split (and optionally date, description or loan).

    Every loan the repayment referenced before or after the edit is
    recomputed; a loan may reopen as a result.
    """
    principal, interest, total = _validate_split(principal, interest, amount)
    repayment = _get_repayment(db, group_id, repayment_id)

    old_loan_id = repayment.loan_id
    new_loan_id = loan_id or old_loan_id
    if new_loan_id != old_loan_id:
        new_loan = find_loan(db, group_id, new_loan_id)
        if new_loan is None:
            raise NotFoundError(f"Loan {new_loan_id} not found")
        if new_loan.member_id != repayment.member_id:
            raise ValidationError(f"Loan {new_loan_id} belongs to a different member")

    changes = []
    with unit_of_work(db, f"edit repayment {repayment_id}"):
        repayment.principal = principal
        repayment.interest = interest
        repayment.amount = total
        repayment.loan_id = new_loan_id
        if repayment_date is not None:
            repayment.date = repayment_date
        if description is not None:
            repayment.description = description
        for affected in dict.fromkeys([old_loan_id, new_loan_id]):
            change = recompute_loan_status(db, group_id, affected)
            if change:
                changes.append(change)

    db.refresh(repayment)
    return RepaymentResult(repayment=repayment, status_changes=changes)


def delete_repayment(
    db: Session,
    group_id: str,
    repayment_id: str
) -> RepaymentResult:
    """Remove a repayment and re-derive its loan's status.

    If the loan was closed and the remaining principal no longer covers it,
    the loan reopens; callers find it in `RepaymentResult.reopened_loans`.
    """
    repayment = _get_repayment(db, group_id, repayment_id)
    loan_id = repayment.loan_id

    with unit_of_work(db, f"delete repayment {repayment_id}"):
        db.delete(repayment)
        change = recompute_loan_status(db, group_id, loan_id)

    return RepaymentResult(repayment=None, status_changes=[c for c in [change] if c])


def recompute_all_loans(db: Session, group_id: str) -> List[LoanStatusChange]:
    """Re-derive every loan of a group from scratch and persist the result."""
    transactions = list_transactions(db, group_id)
    statuses = derive_loan_statuses(transactions)
    changes = []
    with unit_of_work(db, f"recompute loan statuses of group {group_id}"):
        for tx in transactions:
            if tx.type != TransactionType.LOAN:
                continue
            loan_id = tx.loan_id or tx.id
            change = LoanStatusChange(loan_id=loan_id, previous_status=tx.status, status=statuses[loan_id])
            if change.changed:
                tx.status = change.status
                logger.info(f"Loan {loan_id} status {change.previous_status} -> {change.status.value}")
            changes.append(change)

    for orphan in find_orphaned_repayments(transactions):
        report_integrity_issue(
            logger,
            f"Repayment {orphan.id} references missing loan {orphan.loan_id}"
        )
    return changes
