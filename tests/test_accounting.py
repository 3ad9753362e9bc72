"""Balance derivation from transaction lists."""
import random
from datetime import date
from decimal import Decimal

from shg.models.transaction import Transaction, TransactionType
from shg.services.accounting import compute_balances, get_member_balance, to_decimal


def tx(member_id, tx_type, amount, principal=None, interest=None, day=1):
    return Transaction(
        member_id=member_id,
        type=tx_type,
        amount=Decimal(str(amount)),
        date=date(2024, 1, day),
        principal=Decimal(str(principal)) if principal is not None else None,
        interest=Decimal(str(interest)) if interest is not None else None,
    )


def sample_transactions():
    return [
        tx("A", TransactionType.DEPOSIT, 1000),
        tx("B", TransactionType.DEPOSIT, 2000),
        tx("A", TransactionType.LOAN, 500, day=2),
        tx("A", TransactionType.REPAYMENT, 550, principal=500, interest=50, day=3),
        tx("B", TransactionType.LOAN, 800, day=4),
        tx("B", TransactionType.REPAYMENT, 300, principal=250, interest=50, day=5),
        tx("B", TransactionType.LOAN_WAIVED, 100, day=6),
        tx("B", TransactionType.EXPENSE, 40, day=7),
    ]


class TestComputeBalances:
    def test_deposits_and_loans(self):
        balances = compute_balances(sample_transactions())
        assert balances["A"].deposit_balance == Decimal("1000")
        assert balances["A"].loan_balance == Decimal("0")
        assert balances["B"].deposit_balance == Decimal("2000")
        # 800 - 250 principal - 100 waived; interest and expenses do not count
        assert balances["B"].loan_balance == Decimal("450")

    def test_order_independent(self):
        transactions = sample_transactions()
        expected = compute_balances(transactions)
        shuffled = list(transactions)
        random.Random(7).shuffle(shuffled)
        assert compute_balances(shuffled) == expected
        assert compute_balances(list(reversed(transactions))) == expected

    def test_adding_then_removing_restores_balance(self):
        transactions = sample_transactions()
        before = compute_balances(transactions)
        extra = tx("A", TransactionType.DEPOSIT, 250)
        after = compute_balances(transactions + [extra])
        assert after["A"].deposit_balance == before["A"].deposit_balance + Decimal("250")
        assert compute_balances([t for t in transactions + [extra] if t is not extra]) == before

    def test_negative_loan_balance_is_not_clamped(self):
        balances = compute_balances([
            tx("A", TransactionType.LOAN, 100),
            tx("A", TransactionType.REPAYMENT, 150, principal=150, interest=0),
        ])
        assert balances["A"].loan_balance == Decimal("-50")

    def test_empty(self):
        assert compute_balances([]) == {}


class TestGetMemberBalance:
    def test_unknown_member_has_zero_balance(self):
        balance = get_member_balance(sample_transactions(), "Z")
        assert balance.deposit_balance == Decimal("0")
        assert balance.loan_balance == Decimal("0")

    def test_matches_compute_balances(self):
        transactions = sample_transactions()
        assert get_member_balance(transactions, "B") == compute_balances(transactions)["B"]


def test_to_decimal():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("12.50") == Decimal("12.50")
