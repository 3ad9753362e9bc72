"""Flat transaction export with an all-time summary block."""
import logging
from typing import Iterable, Optional

from shg.core.exceptions import NotFoundError
from shg.models.transaction import TransactionType
from shg.schemas.report import Report, ReportRow
from shg.schemas.summary import PeriodFilter
from shg.services.accounting import to_decimal
from shg.services.summary import UNKNOWN_MEMBER, compute_group_summary, member_names
from shg.services.transaction import filter_transactions

logger = logging.getLogger(__name__)

NO_VALUE = "-"


def report_title(period: Optional[PeriodFilter]) -> str:
    if period is None or period.kind == "all":
        return "All Transactions Report"
    first, last = period.bounds()
    if period.kind == "monthly":
        return f"Monthly Report: {first.strftime('%B %Y')}"
    if period.kind == "yearly":
        return f"Yearly Report: {period.year}"
    return f"Custom Report: {first.strftime('%d/%m/%y')} - {last.strftime('%d/%m/%y')}"


def _money(value) -> str:
    return f"{to_decimal(value):.2f}"


def report_row(tx, names) -> ReportRow:
    is_repayment = tx.type == TransactionType.REPAYMENT
    return ReportRow(
        member_name=names.get(tx.member_id, UNKNOWN_MEMBER),
        date=tx.date.isoformat(),
        type=tx.type.value,
        description=tx.description or NO_VALUE,
        total_amount=_money(tx.amount),
        principal=_money(tx.principal) if is_repayment else NO_VALUE,
        interest=_money(tx.interest) if is_repayment else NO_VALUE,
    )


def build_report(
    transactions: Iterable,
    members: Iterable,
    period: Optional[PeriodFilter] = None,
    tx_type: Optional[TransactionType] = None
) -> Report:
    """Rows for the selected period and type; the summary is always all-time.

    Rows include every transaction in the window, inactive members' too.
    """
    transactions = list(transactions)
    members = list(members)
    selected = filter_transactions(transactions, members, period=period, tx_type=tx_type)
    if not selected:
        label = f"{tx_type.value} " if tx_type is not None else ""
        raise NotFoundError(f"No {label}transactions found for the selected period.")

    names = member_names(members)
    totals = compute_group_summary(transactions, members)
    title = report_title(period)
    logger.info(f"{title}: {len(selected)} rows")
    return Report(
        title=title,
        rows=[report_row(tx, names) for tx in selected],
        summary={
            "Total Deposits": totals.total_deposits,
            "Total Loans": totals.total_loan,
            "Total Principal Repaid": totals.total_repayment_principal,
            "Total Interest Earned": totals.total_interest,
            "Remaining Fund": totals.remaining_fund,
        },
    )
