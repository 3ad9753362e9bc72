"""Interest distribution and member passbooks.

Interest collected on repayments belongs to the group and is split equally
among contributing members. Inactive members get nothing and do not count
in the divisor.

Two divisor policies exist (settings.INTEREST_SHARE_POLICY):

current_members       total interest / number of contributing members now.
                      A member who joins later dilutes earlier shares.
members_at_repayment  each repayment's interest is split among contributing
                      members who had joined by the repayment date. A
                      repayment that predates every join date is split
                      among all contributing members.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from shg.core.config import (
    settings,
    INTEREST_POLICY_CURRENT_MEMBERS,
    INTEREST_POLICY_MEMBERS_AT_REPAYMENT,
)
from shg.core.exceptions import ValidationError
from shg.models.member import MemberStatus
from shg.models.transaction import TransactionType
from shg.services.accounting import ZERO, MemberBalance, get_member_balance, to_decimal

logger = logging.getLogger(__name__)


def _contributing(members: Iterable) -> List:
    return [m for m in members if m.is_contributing]


def total_contributing_interest(transactions: Iterable, members: Iterable) -> Decimal:
    """All interest paid on repayments by contributing members."""
    ids = {m.id for m in _contributing(members)}
    return sum(
        (to_decimal(tx.interest) for tx in transactions
         if tx.type == TransactionType.REPAYMENT and tx.member_id in ids),
        ZERO,
    )


def compute_interest_share(
    member,
    all_transactions: Iterable,
    all_members: Iterable,
    policy: Optional[str] = None
) -> Decimal:
    """The member's equal share of the group's collected interest."""
    policy = policy or settings.INTEREST_SHARE_POLICY
    if member.status == MemberStatus.INACTIVE:
        return ZERO

    all_transactions = list(all_transactions)
    contributing = _contributing(all_members)
    if not contributing:
        return ZERO

    if policy == INTEREST_POLICY_CURRENT_MEMBERS:
        return total_contributing_interest(all_transactions, contributing) / len(contributing)

    if policy == INTEREST_POLICY_MEMBERS_AT_REPAYMENT:
        ids = {m.id for m in contributing}
        share = ZERO
        for tx in all_transactions:
            if tx.type != TransactionType.REPAYMENT or tx.member_id not in ids:
                continue
            eligible = [m.id for m in contributing if m.join_date is None or m.join_date <= tx.date]
            if not eligible:
                eligible = list(ids)
            if member.id not in eligible:
                continue
            share += to_decimal(tx.interest) / len(eligible)
        return share

    raise ValidationError(f"Unknown interest share policy: {policy}")


@dataclass
class Passbook:
    """Read-only statement of one member."""
    member: object
    transactions: List = field(default_factory=list)  # newest first
    balance: MemberBalance = field(default_factory=MemberBalance)
    interest_share: Decimal = ZERO

    @property
    def deposit_balance(self) -> Decimal:
        return self.balance.deposit_balance

    @property
    def loan_balance(self) -> Decimal:
        return self.balance.loan_balance

    @property
    def grand_total(self) -> Decimal:
        """Own deposits plus own interest share (not the group's total interest)."""
        return self.balance.deposit_balance + self.interest_share


def build_passbook(
    member,
    all_transactions: Iterable,
    all_members: Iterable,
    policy: Optional[str] = None
) -> Passbook:
    all_transactions = list(all_transactions)
    own = sorted(
        (tx for tx in all_transactions if tx.member_id == member.id),
        key=lambda tx: tx.date,
        reverse=True,
    )
    return Passbook(
        member=member,
        transactions=own,
        balance=get_member_balance(own, member.id),
        interest_share=compute_interest_share(member, all_transactions, all_members, policy),
    )
