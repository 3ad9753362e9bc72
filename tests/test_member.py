"""Member registry: lifecycle, id changes and deletion rules."""
from datetime import date
from decimal import Decimal

import pytest

from shg.core.exceptions import NotFoundError, ValidationError
from shg.models.member import MemberStatus, MemberStatusHistory
from shg.models.transaction import TransactionType
from shg.services.accounting import compute_balances
from shg.services.member import (
    change_member_status,
    create_member,
    delete_member,
    format_aadhaar,
    list_members_with_balances,
    normalize_aadhaar,
    search_members,
    update_member,
)
from shg.services.store import find_member, list_member_transactions, list_transactions
from shg.services.transaction import add_transaction


def give_loan(db, group_id, member_id, amount, principal_repaid=None):
    loan = add_transaction(db, group_id, member_id, TransactionType.LOAN, Decimal(amount), date(2024, 1, 10)).transaction
    if principal_repaid:
        add_transaction(
            db, group_id, member_id, TransactionType.REPAYMENT, None, date(2024, 2, 10),
            principal=Decimal(principal_repaid), interest=Decimal("0"), loan_id=loan.id,
        )
    return loan


class TestAadhaar:
    def test_normalize_strips_dashes(self):
        assert normalize_aadhaar("1234-5678-9012") == "123456789012"
        assert normalize_aadhaar("123456789012") == "123456789012"

    @pytest.mark.parametrize("value", ["12345678901", "1234-5678-901a", "", "1234--5678-9012"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError, match="Aadhaar must be 12 digits"):
            normalize_aadhaar(value)

    def test_format(self):
        assert format_aadhaar("123456789012") == "1234-5678-9012"


class TestCreateMember:
    def test_starts_active_with_history(self, db, group_id):
        member = create_member(db, group_id, "M-1", "Asha", "9876543210", "1234-5678-9012", date(2024, 1, 1))
        assert member.status == MemberStatus.ACTIVE
        history = db.query(MemberStatusHistory).filter(MemberStatusHistory.member_id == "M-1").all()
        assert [h.new_status for h in history] == [MemberStatus.ACTIVE]

    def test_duplicate_id_rejected(self, db, group_id, make_member):
        make_member("M-1")
        with pytest.raises(ValidationError, match="already exists"):
            make_member("M-1")

    def test_same_id_in_another_group(self, db, make_member):
        make_member("M-1")
        other = make_member("M-1", group_id="group-2")
        assert other.group_id == "group-2"


class TestStatus:
    def test_active_inactive_round_trip(self, db, group_id, make_member):
        make_member("M-1")
        assert change_member_status(db, group_id, "M-1", MemberStatus.INACTIVE).status == MemberStatus.INACTIVE
        assert change_member_status(db, group_id, "M-1", MemberStatus.ACTIVE).status == MemberStatus.ACTIVE

    def test_closed_is_terminal(self, db, group_id, make_member):
        make_member("M-1", status=MemberStatus.CLOSED)
        with pytest.raises(ValidationError):
            change_member_status(db, group_id, "M-1", MemberStatus.ACTIVE)
        with pytest.raises(ValidationError):
            update_member(db, group_id, "M-1", name="New name")
        with pytest.raises(ValidationError):
            delete_member(db, group_id, "M-1")

    def test_cannot_close_with_outstanding_loan(self, db, group_id, make_member):
        make_member("M-1")
        give_loan(db, group_id, "M-1", "500", principal_repaid="200")
        with pytest.raises(ValidationError, match="outstanding loan balance of 300"):
            change_member_status(db, group_id, "M-1", MemberStatus.CLOSED)
        assert find_member(db, group_id, "M-1").status == MemberStatus.ACTIVE

    def test_status_change_is_audited(self, db, group_id, make_member, audit_dir):
        make_member("M-1")
        change_member_status(db, group_id, "M-1", MemberStatus.INACTIVE, changed_by="treasurer")
        log = "".join(p.read_text() for p in audit_dir.glob("audit_*.log"))
        assert "treasurer | member_status" in log


class TestUpdateMember:
    def test_id_change_moves_transactions(self, db, group_id, make_member):
        make_member("M-1", "Asha")
        add_transaction(db, group_id, "M-1", TransactionType.DEPOSIT, Decimal("1000"), date(2024, 1, 5))
        give_loan(db, group_id, "M-1", "500", principal_repaid="200")
        before = compute_balances(list_transactions(db, group_id))["M-1"]

        member = update_member(db, group_id, "M-1", new_id="M-2")

        assert member.id == "M-2"
        assert member.name == "Asha"
        assert find_member(db, group_id, "M-1") is None
        assert list_member_transactions(db, group_id, "M-1") == []
        assert len(list_member_transactions(db, group_id, "M-2")) == 3
        assert compute_balances(list_transactions(db, group_id))["M-2"] == before

    def test_id_change_to_existing_id_rejected(self, db, group_id, make_member):
        make_member("M-1")
        make_member("M-2")
        with pytest.raises(ValidationError, match="already exists"):
            update_member(db, group_id, "M-1", new_id="M-2")

    def test_edit_details(self, db, group_id, make_member):
        make_member("M-1")
        member = update_member(db, group_id, "M-1", name="Asha Devi", aadhaar="1111-2222-3333")
        assert member.name == "Asha Devi"
        assert member.aadhaar == "111122223333"


class TestDeleteMember:
    def test_outstanding_loan_blocks_deletion(self, db, group_id, make_member):
        make_member("M-1")
        give_loan(db, group_id, "M-1", "500", principal_repaid="200")
        with pytest.raises(ValidationError, match="300"):
            delete_member(db, group_id, "M-1")
        assert find_member(db, group_id, "M-1") is not None
        assert len(list_member_transactions(db, group_id, "M-1")) == 2

    def test_deletes_member_and_transactions(self, db, group_id, make_member):
        make_member("M-1")
        add_transaction(db, group_id, "M-1", TransactionType.DEPOSIT, Decimal("1000"), date(2024, 1, 5))
        give_loan(db, group_id, "M-1", "500", principal_repaid="500")

        assert delete_member(db, group_id, "M-1") == 3
        assert find_member(db, group_id, "M-1") is None
        assert list_transactions(db, group_id) == []

    def test_missing_member(self, db, group_id):
        with pytest.raises(NotFoundError):
            delete_member(db, group_id, "nobody")


class TestListing:
    def test_search(self, db, group_id, make_member):
        make_member("M-1", "Asha")
        make_member("M-2", "Bina")
        members = list_members_with_balances(db, group_id)
        assert [m.id for m, _ in members] == ["M-1", "M-2"]
        assert [m.id for m in search_members([m for m, _ in members], "bin")] == ["M-2"]
        assert [m.id for m, _ in list_members_with_balances(db, group_id, "m-1")] == ["M-1"]

    def test_balances_attached(self, db, group_id, make_member):
        make_member("M-1")
        add_transaction(db, group_id, "M-1", TransactionType.DEPOSIT, Decimal("250"), date(2024, 1, 5))
        [(member, balance)] = list_members_with_balances(db, group_id)
        assert balance.deposit_balance == Decimal("250")
