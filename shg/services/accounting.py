"""Per-member balance derivation.

Balances are never stored. They are folded from the transaction list on
every read so that no cached counter can drift from the records.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable

from shg.models.transaction import TransactionType

ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Coerce a stored or submitted amount to Decimal (None counts as zero)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass
class MemberBalance:
    deposit_balance: Decimal = field(default=ZERO)
    loan_balance: Decimal = field(default=ZERO)


def apply_transaction(balance: MemberBalance, tx) -> None:
    """Fold one transaction into a member balance.

    Interest never touches the loan balance and expenses touch neither
    balance (they only reduce the group pool).
    """
    if tx.type == TransactionType.DEPOSIT:
        balance.deposit_balance += to_decimal(tx.amount)
    elif tx.type == TransactionType.LOAN:
        balance.loan_balance += to_decimal(tx.amount)
    elif tx.type == TransactionType.REPAYMENT:
        balance.loan_balance -= to_decimal(tx.principal)
    elif tx.type == TransactionType.LOAN_WAIVED:
        balance.loan_balance -= to_decimal(tx.amount)


def compute_balances(transactions: Iterable) -> Dict[str, MemberBalance]:
    """Derive deposit and loan balances for every member id in `transactions`.

    Order independent and side-effect free. Values are not clamped: a
    negative loan balance means upstream data is wrong and is returned as-is.
    """
    balances: Dict[str, MemberBalance] = {}
    for tx in transactions:
        balance = balances.get(tx.member_id)
        if balance is None:
            balance = balances[tx.member_id] = MemberBalance()
        apply_transaction(balance, tx)
    return balances


def get_member_balance(transactions: Iterable, member_id: str) -> MemberBalance:
    """Balance of one member (zero balances if the member has no transactions)."""
    balance = MemberBalance()
    for tx in transactions:
        if tx.member_id == member_id:
            apply_transaction(balance, tx)
    return balance
