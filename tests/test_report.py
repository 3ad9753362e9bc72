"""Report export rows, titles and summary block."""
from datetime import date
from decimal import Decimal

import pytest

from shg.core.exceptions import DataIntegrityWarning, NotFoundError
from shg.models.member import MemberStatus
from shg.models.transaction import Transaction, TransactionType
from shg.schemas.summary import PeriodFilter
from shg.services.member import change_member_status
from shg.services.report import build_report, report_title
from shg.services.store import list_members, list_transactions
from shg.services.transaction import add_transaction


@pytest.fixture
def books(db, group_id, make_member):
    make_member("A", "Anita")
    make_member("B", "Bhavna")
    add_transaction(db, group_id, "A", TransactionType.DEPOSIT, Decimal("1000"), date(2024, 1, 5))
    add_transaction(db, group_id, "B", TransactionType.DEPOSIT, Decimal("2000"), date(2024, 1, 6), "Savings")
    loan = add_transaction(db, group_id, "A", TransactionType.LOAN, Decimal("500"), date(2024, 1, 10)).transaction
    add_transaction(
        db, group_id, "A", TransactionType.REPAYMENT, None, date(2024, 2, 10),
        principal=Decimal("500"), interest=Decimal("50"), loan_id=loan.id,
    )


def report(db, group_id, **kwargs):
    return build_report(list_transactions(db, group_id), list_members(db, group_id), **kwargs)


class TestTitles:
    def test_titles(self):
        assert report_title(None) == "All Transactions Report"
        assert report_title(PeriodFilter(kind="monthly", year=2024, month=3)) == "Monthly Report: March 2024"
        assert report_title(PeriodFilter(kind="yearly", year=2024)) == "Yearly Report: 2024"
        assert report_title(
            PeriodFilter(kind="custom", start=date(2024, 1, 5), end=date(2024, 2, 9))
        ) == "Custom Report: 05/01/24 - 09/02/24"


class TestBuildReport:
    def test_rows(self, db, group_id, books):
        result = report(db, group_id)
        assert result.title == "All Transactions Report"
        assert len(result.rows) == 4

        repayment = result.rows[0]
        assert repayment.member_name == "Anita"
        assert repayment.type == "repayment"
        assert repayment.description == "-"
        assert repayment.total_amount == "550.00"
        assert repayment.principal == "500.00"
        assert repayment.interest == "50.00"

        deposit = next(r for r in result.rows if r.member_name == "Bhavna")
        assert deposit.description == "Savings"
        assert deposit.date == "2024-01-06"
        assert deposit.principal == "-"
        assert deposit.interest == "-"

    def test_row_aliases(self, db, group_id, books):
        row = report(db, group_id).rows[0].model_dump(by_alias=True)
        assert set(row) == {"memberName", "date", "type", "description", "totalAmount", "principal", "interest"}

    def test_summary_is_all_time(self, db, group_id, books):
        result = report(db, group_id, period=PeriodFilter(kind="monthly", year=2024, month=2))
        assert result.title == "Monthly Report: February 2024"
        assert len(result.rows) == 1
        assert result.summary == {
            "Total Deposits": Decimal("3050"),
            "Total Loans": Decimal("500"),
            "Total Principal Repaid": Decimal("500"),
            "Total Interest Earned": Decimal("50"),
            "Remaining Fund": Decimal("3050"),
        }

    def test_type_filter(self, db, group_id, books):
        result = report(db, group_id, tx_type=TransactionType.DEPOSIT)
        assert {r.type for r in result.rows} == {"deposit"}

    def test_no_rows(self, db, group_id, books):
        with pytest.raises(NotFoundError, match="No loan transactions"):
            report(db, group_id, period=PeriodFilter(kind="yearly", year=2023), tx_type=TransactionType.LOAN)

    def test_inactive_and_unknown_members_still_listed(self, db, group_id, books):
        change_member_status(db, group_id, "B", MemberStatus.INACTIVE)
        db.add(Transaction(
            group_id=group_id, member_id="ghost", type=TransactionType.DEPOSIT,
            amount=Decimal("5"), date=date(2024, 3, 1),
        ))
        db.commit()
        with pytest.warns(DataIntegrityWarning):
            result = report(db, group_id)
        assert {r.member_name for r in result.rows} == {"Anita", "Bhavna", "Unknown"}
        assert result.summary["Total Deposits"] == Decimal("1050")
