"""Group-wide totals.

Only contributing members (status active or closed) count. An inactive
member's transactions, including their own past deposits, drop out of
every group total until the member is reactivated.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from shg.core.exceptions import ValidationError, report_integrity_issue
from shg.models.transaction import TransactionType
from shg.schemas.summary import GroupSummary, IntegrityIssue, MonthlyOverview, PeriodFilter
from shg.services.accounting import ZERO, to_decimal
from shg.services.loan import find_orphaned_repayments

logger = logging.getLogger(__name__)

UNKNOWN_MEMBER = "Unknown"


def contributing_member_ids(members: Iterable) -> set:
    return {m.id for m in members if m.is_contributing}


def member_names(members: Iterable) -> Dict[str, str]:
    return {m.id: m.name for m in members}


def contributing_transactions(
    transactions: Iterable,
    members: Iterable,
    period: Optional[PeriodFilter] = None
) -> List:
    """Transactions of contributing members, restricted to `period` by date."""
    members = list(members)
    known = {m.id for m in members}
    contributing = contributing_member_ids(members)

    selected = []
    unknown = set()
    for tx in transactions:
        if tx.member_id not in known:
            unknown.add(tx.member_id)
            continue
        if tx.member_id not in contributing:
            continue
        if period is not None and not period.contains(tx.date):
            continue
        selected.append(tx)

    if unknown:
        report_integrity_issue(
            logger,
            f"Transactions reference unknown member ids {sorted(unknown)}; excluded from group totals"
        )
    return selected


def compute_group_summary(
    transactions: Iterable,
    members: Iterable,
    period: Optional[PeriodFilter] = None
) -> GroupSummary:
    """Aggregate contributing members' transactions into group totals.

    remaining_fund is cash in (deposits, interest, principal repaid) minus
    cash out (loans disbursed).
    """
    members = list(members)
    selected = contributing_transactions(transactions, members, period)

    deposits = loans = principal = interest = expenses = waived = ZERO
    for tx in selected:
        if tx.type == TransactionType.DEPOSIT:
            deposits += to_decimal(tx.amount)
        elif tx.type == TransactionType.LOAN:
            loans += to_decimal(tx.amount)
        elif tx.type == TransactionType.REPAYMENT:
            principal += to_decimal(tx.principal)
            interest += to_decimal(tx.interest)
        elif tx.type == TransactionType.EXPENSE:
            expenses += to_decimal(tx.amount)
        elif tx.type == TransactionType.LOAN_WAIVED:
            waived += to_decimal(tx.amount)

    return GroupSummary(
        total_deposits=deposits + interest - (expenses + waived),
        total_loan=loans,
        total_repayment_principal=principal,
        total_interest=interest,
        total_expenses=expenses,
        total_loan_waived=waived,
        outstanding_loan=loans - principal,
        remaining_fund=(deposits + interest + principal) - loans,
        contributing_members=len(contributing_member_ids(members)),
        transaction_count=len(selected),
    )


def compute_cash_on_hand(
    transactions: Iterable,
    members: Iterable,
    period: Optional[PeriodFilter] = None
) -> Decimal:
    """Cash in minus cash out, straight from transaction amounts.

    Deposits and repayments (their full amount) come in, loans go out. For
    consistent data this equals GroupSummary.remaining_fund.
    """
    total = ZERO
    for tx in contributing_transactions(transactions, members, period):
        if tx.type in (TransactionType.DEPOSIT, TransactionType.REPAYMENT):
            total += to_decimal(tx.amount)
        elif tx.type == TransactionType.LOAN:
            total -= to_decimal(tx.amount)
    return total


def latest_transaction_month(transactions: Iterable):
    """(year, month) of the most recent transaction date, or None."""
    dates = [tx.date for tx in transactions]
    if not dates:
        return None
    latest = max(dates)
    return latest.year, latest.month


def _distinct_names(txs, names: Dict[str, str]) -> List[str]:
    return list(dict.fromkeys(names.get(tx.member_id, UNKNOWN_MEMBER) for tx in txs))


def compute_monthly_overview(
    transactions: Iterable,
    members: Iterable,
    year: int = None,
    month: int = None
) -> MonthlyOverview:
    """Totals and participants of one month.

    Without an explicit month this is the month of the most recent
    transaction date in the books, whoever recorded it. Only contributing
    members' transactions are totalled.
    """
    if (year is None) != (month is None):
        raise ValidationError("Year and month must be given together.")

    transactions = list(transactions)
    members = list(members)
    selected = contributing_transactions(transactions, members)

    if year is None:
        latest = latest_transaction_month(transactions)
        if latest is None:
            return MonthlyOverview()
        year, month = latest

    period = PeriodFilter(kind="monthly", year=year, month=month)
    in_month = [tx for tx in selected if period.contains(tx.date)]
    names = member_names(members)

    deposits = [tx for tx in in_month if tx.type == TransactionType.DEPOSIT]
    loans = [tx for tx in in_month if tx.type == TransactionType.LOAN]
    repayments = [tx for tx in in_month if tx.type == TransactionType.REPAYMENT]

    return MonthlyOverview(
        year=year,
        month=month,
        total_interest=sum((to_decimal(tx.interest) for tx in repayments), ZERO),
        total_deposit=sum((to_decimal(tx.amount) for tx in deposits), ZERO),
        deposit_members=_distinct_names(deposits, names),
        total_loan=sum((to_decimal(tx.amount) for tx in loans), ZERO),
        loan_takers=_distinct_names(loans, names),
        total_repayment=sum((to_decimal(tx.amount) for tx in repayments), ZERO),
        loan_repayers=_distinct_names(repayments, names),
    )


def find_integrity_issues(transactions: Iterable, members: Iterable) -> List[IntegrityIssue]:
    """Orphaned repayments and transactions pointing at unknown members."""
    transactions = list(transactions)
    known = {m.id for m in members}
    issues = []

    for tx in find_orphaned_repayments(transactions):
        issues.append(IntegrityIssue(
            kind="orphaned_repayment",
            transaction_id=tx.id,
            member_id=tx.member_id,
            loan_id=tx.loan_id,
            message=f"Repayment {tx.id} references missing loan {tx.loan_id}",
        ))
    for tx in transactions:
        if tx.member_id not in known:
            issues.append(IntegrityIssue(
                kind="unknown_member",
                transaction_id=tx.id,
                member_id=tx.member_id,
                message=f"Transaction {tx.id} references unknown member {tx.member_id}",
            ))

    for issue in issues:
        report_integrity_issue(logger, issue.message)
    return issues
