"""Interest sharing and passbooks."""
from datetime import date
from decimal import Decimal

import pytest

from shg.core.config import INTEREST_POLICY_CURRENT_MEMBERS, INTEREST_POLICY_MEMBERS_AT_REPAYMENT
from shg.core.exceptions import ValidationError
from shg.models.member import MemberStatus
from shg.models.transaction import TransactionType
from shg.services.interest import build_passbook, compute_interest_share
from shg.services.member import change_member_status
from shg.services.store import get_member, list_members, list_transactions
from shg.services.summary import compute_group_summary
from shg.services.transaction import add_transaction


@pytest.fixture
def books(db, group_id, make_member):
    make_member("A", "Anita", join_date=date(2024, 1, 1))
    make_member("B", "Bhavna", join_date=date(2024, 1, 1))
    make_member("C", "Charu", join_date=date(2024, 1, 1))
    add_transaction(db, group_id, "A", TransactionType.DEPOSIT, Decimal("1000"), date(2024, 1, 5))
    add_transaction(db, group_id, "B", TransactionType.DEPOSIT, Decimal("2000"), date(2024, 1, 6))
    loan = add_transaction(db, group_id, "A", TransactionType.LOAN, Decimal("500"), date(2024, 1, 10)).transaction
    add_transaction(
        db, group_id, "A", TransactionType.REPAYMENT, None, date(2024, 2, 10),
        principal=Decimal("500"), interest=Decimal("50"), loan_id=loan.id,
    )
    change_member_status(db, group_id, "C", MemberStatus.INACTIVE)


def share(db, group_id, member_id, policy=None):
    return compute_interest_share(
        get_member(db, group_id, member_id),
        list_transactions(db, group_id),
        list_members(db, group_id),
        policy,
    )


class TestInterestShare:
    def test_equal_split_among_contributing_members(self, db, group_id, books):
        assert share(db, group_id, "A") == Decimal("25")
        assert share(db, group_id, "B") == Decimal("25")
        assert share(db, group_id, "C") == Decimal("0")

    def test_new_member_dilutes_current_members_policy(self, db, group_id, books, make_member):
        make_member("D", "Devi", join_date=date(2024, 6, 1))
        assert share(db, group_id, "A", INTEREST_POLICY_CURRENT_MEMBERS) == Decimal("50") / 3
        assert share(db, group_id, "D", INTEREST_POLICY_CURRENT_MEMBERS) == Decimal("50") / 3

    def test_members_at_repayment_policy(self, db, group_id, books, make_member):
        make_member("D", "Devi", join_date=date(2024, 6, 1))
        assert share(db, group_id, "A", INTEREST_POLICY_MEMBERS_AT_REPAYMENT) == Decimal("25")
        assert share(db, group_id, "D", INTEREST_POLICY_MEMBERS_AT_REPAYMENT) == Decimal("0")

    def test_reactivated_member_regains_share(self, db, group_id, books):
        change_member_status(db, group_id, "C", MemberStatus.ACTIVE)
        add_transaction(db, group_id, "C", TransactionType.DEPOSIT, Decimal("700"), date(2024, 3, 1))
        change_member_status(db, group_id, "C", MemberStatus.INACTIVE)

        passbook = build_passbook(
            get_member(db, group_id, "C"), list_transactions(db, group_id), list_members(db, group_id)
        )
        assert passbook.interest_share == Decimal("0")
        assert passbook.grand_total == Decimal("700")

        change_member_status(db, group_id, "C", MemberStatus.ACTIVE)
        passbook = build_passbook(
            get_member(db, group_id, "C"), list_transactions(db, group_id), list_members(db, group_id)
        )
        assert passbook.interest_share == Decimal("50") / 3
        assert passbook.grand_total == Decimal("700") + Decimal("50") / 3
        assert share(db, group_id, "A") == Decimal("50") / 3

    @pytest.mark.parametrize("policy", [INTEREST_POLICY_CURRENT_MEMBERS, INTEREST_POLICY_MEMBERS_AT_REPAYMENT])
    def test_shares_add_up_to_total_interest(self, db, group_id, make_member, policy):
        make_member("A", "Anita", join_date=date(2024, 6, 1))
        make_member("B", "Bhavna", join_date=date(2024, 6, 1))
        loan = add_transaction(db, group_id, "A", TransactionType.LOAN, Decimal("500"), date(2024, 1, 10)).transaction
        add_transaction(
            db, group_id, "A", TransactionType.REPAYMENT, None, date(2024, 2, 10),
            principal=Decimal("500"), interest=Decimal("50"), loan_id=loan.id,
        )

        shares = [share(db, group_id, member_id, policy) for member_id in ("A", "B")]
        summary = compute_group_summary(list_transactions(db, group_id), list_members(db, group_id))
        assert shares == [Decimal("25"), Decimal("25")]
        assert sum(shares) == summary.total_interest

    def test_closed_member_keeps_share(self, db, group_id, books):
        change_member_status(db, group_id, "B", MemberStatus.CLOSED)
        assert share(db, group_id, "B") == Decimal("25")

    def test_unknown_policy(self, db, group_id, books):
        with pytest.raises(ValidationError):
            share(db, group_id, "A", "per_deposit")


class TestPassbook:
    def test_grand_total_is_own_deposits_plus_own_share(self, db, group_id, books):
        passbook = build_passbook(
            get_member(db, group_id, "B"), list_transactions(db, group_id), list_members(db, group_id)
        )
        assert passbook.deposit_balance == Decimal("2000")
        assert passbook.loan_balance == Decimal("0")
        assert passbook.interest_share == Decimal("25")
        assert passbook.grand_total == Decimal("2025")

    def test_transactions_newest_first(self, db, group_id, books):
        passbook = build_passbook(
            get_member(db, group_id, "A"), list_transactions(db, group_id), list_members(db, group_id)
        )
        assert [tx.type for tx in passbook.transactions] == [
            TransactionType.REPAYMENT,
            TransactionType.LOAN,
            TransactionType.DEPOSIT,
        ]
        assert passbook.grand_total == Decimal("1025")
