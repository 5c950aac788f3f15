"""
Report tests.

Verifies:
- Each report kind's rows, headers and summary totals
- Inclusive ranges, default range, and range/kind validation
- Reports are read-only and repeatable
"""

from datetime import date

import pytest

from estatebooks.services import inventory_service, ledger_service, project_service, reporting_service
from estatebooks.services.reporting_service import ReportError, build_report
from estatebooks.time_utils import first_of_month
from estatebooks.validation import NotFoundError, ValidationError

JAN_1 = date(2025, 1, 1)
JAN_31 = date(2025, 1, 31)


@pytest.fixture
def january_ledger(store, manager, employee):
    entries = [
        (date(2025, 1, 5), "revenue", "sale of unit A1 of project Nile View to Ali", "200000"),
        (date(2025, 1, 6), "expense", "January salary payments", "12000"),
        (date(2025, 1, 7), "expense", "مرتبات يناير", "3000"),
        (date(2025, 1, 8), "expense", "cement purchase", "500000"),
        (date(2025, 2, 1), "revenue", "February rent", "999"),
    ]
    for tx_date, tx_type, description, amount in entries:
        ledger_service.record_transaction(
            store, employee if tx_type == "expense" else manager,
            tx_date=tx_date, tx_type=tx_type, description=description, amount=amount,
        )
    return store


class TestProfitLoss:

    def test_totals_and_rows(self, january_ledger):
        report = build_report(january_ledger, "profit-loss", date_from=JAN_1, date_to=JAN_31)
        assert report.summary == {"revenue": 200000, "expense": 515000, "net": -315000}
        assert report.headers == ["Item", "Amount"]
        assert report.rows == [
            ["Total revenue", "200,000 EGP"],
            ["Total expenses", "515,000 EGP"],
            ["Net profit", "-315,000 EGP"],
        ]

    def test_idempotent(self, january_ledger):
        first = build_report(january_ledger, "profit-loss", date_from="2025-01-01", date_to="2025-01-31")
        second = build_report(january_ledger, "profit-loss", date_from="2025-01-01", date_to="2025-01-31")
        assert first.to_dict() == second.to_dict()

    def test_empty_range(self, january_ledger):
        report = build_report(january_ledger, "profit-loss", date_from="2024-01-01", date_to="2024-01-31")
        assert report.summary == {"revenue": 0, "expense": 0, "net": 0}

    def test_currency_label(self, january_ledger):
        report = build_report(january_ledger, "profit-loss", date_from=JAN_1, date_to=JAN_31, currency="USD")
        assert report.rows[0] == ["Total revenue", "200,000 USD"]


class TestLedgerReports:

    def test_revenue(self, january_ledger):
        report = build_report(january_ledger, "revenue", date_from=JAN_1, date_to=JAN_31)
        assert report.headers == ["Date", "Description", "Amount"]
        assert report.rows == [["2025-01-05", "sale of unit A1 of project Nile View to Ali", "200,000 EGP"]]
        assert report.summary == {"total": 200000, "count": 1}

    def test_expense_includes_unapproved(self, january_ledger):
        report = build_report(january_ledger, "expense", date_from=JAN_1, date_to=JAN_31)
        assert [r[0] for r in report.rows] == ["2025-01-08", "2025-01-07", "2025-01-06"]
        assert report.summary["total"] == 515000

    def test_salary_keywords(self, january_ledger):
        report = build_report(january_ledger, "salary", date_from=JAN_1, date_to=JAN_31)
        assert sorted(r[1] for r in report.rows) == sorted(["January salary payments", "مرتبات يناير"])
        assert report.summary == {"total": 15000, "count": 2}

    def test_inclusive_bounds(self, january_ledger):
        report = build_report(january_ledger, "revenue", date_from="2025-01-05", date_to="2025-02-01")
        assert report.summary["count"] == 2

    def test_rows_are_rectangular(self, january_ledger):
        report = build_report(january_ledger, "expense", date_from=JAN_1, date_to=JAN_31)
        assert all(len(row) == len(report.headers) for row in report.rows)
        assert all(isinstance(cell, str) for row in report.rows for cell in row)


class TestInventoryReport:

    def test_status_column(self, store):
        inventory_service.create_item(store, name="Cement", unit="ton", quantity="50", min_quantity="100")
        inventory_service.create_item(store, name="Sand", unit="m3", quantity="2.5", min_quantity="1")
        report = build_report(store, "inventory")
        rows = {row[0]: row for row in report.rows}
        assert rows["Cement"] == ["Cement", "50 ton", "100", "low"]
        assert rows["Sand"] == ["Sand", "2.5 m3", "1", "ok"]
        assert report.summary == {"items": 2, "low": 1}


class TestProjectReport:

    def test_project_rows(self, store, manager):
        project = project_service.create_project(store, name="Nile View", location="Giza", floors=12, units=48)
        project_service.add_project_cost(
            store, manager, project_id=project.id, cost_type="construction", amount="1234.5",
        )
        project_service.add_project_sale(
            store, manager, project_id=project.id, unit_no="A1", buyer="Ali", price="200000",
        )
        report = build_report(store, "project", project_id=project.id)
        assert report.title == "Project report: Nile View"
        assert report.rows == [
            ["Project", "Nile View"],
            ["Location", "Giza"],
            ["Floors", "12"],
            ["Units", "48"],
            ["Total costs", "1,234.50 EGP"],
            ["Total sales", "200,000 EGP"],
            ["Profit/loss", "198,765.50 EGP"],
        ]
        assert report.summary["profit"] == 198765.5

    def test_costs_and_sales_outside_range_are_excluded(self, store, manager):
        project = project_service.create_project(store, name="Nile View", location="Giza", floors=12, units=48)
        project_service.add_project_cost(
            store, manager, project_id=project.id, cost_type="construction", amount="1000",
            date=date(2024, 6, 1),
        )
        project_service.add_project_sale(
            store, manager, project_id=project.id, unit_no="A1", buyer="Ali", price="200000",
            date=date(2024, 6, 2),
        )
        project_service.add_project_cost(
            store, manager, project_id=project.id, cost_type="operation", amount="250",
            date=date(2025, 1, 31),
        )

        report = build_report(
            store, "project", project_id=project.id, date_from="2025-01-01", date_to="2025-01-31",
        )
        assert report.summary == {
            "project": "Nile View", "total_costs": 250, "total_sales": 0, "profit": -250,
        }
        assert report.rows[-1] == ["Profit/loss", "-250 EGP"]

        whole = build_report(
            store, "project", project_id=project.id, date_from="2024-01-01", date_to="2025-12-31",
        )
        assert whole.summary["total_costs"] == 1250
        assert whole.summary["total_sales"] == 200000

    def test_requires_project_id(self, store):
        with pytest.raises(ValidationError):
            build_report(store, "project")

    def test_unknown_project(self, store):
        with pytest.raises(NotFoundError):
            build_report(store, "project", project_id="missing")


class TestParameters:

    def test_unknown_kind(self, store):
        with pytest.raises(ReportError):
            build_report(store, "balance-sheet")

    def test_inverted_range(self, store):
        with pytest.raises(ValidationError):
            build_report(store, "revenue", date_from="2025-02-01", date_to="2025-01-01")

    def test_bad_date(self, store):
        with pytest.raises(ValidationError):
            build_report(store, "revenue", date_from="yesterday")

    def test_default_range_is_month_to_date(self, store):
        report = build_report(store, "revenue")
        assert report.date_from == first_of_month()
        assert report.date_to == date.today()
        assert report.rows == []

    def test_kinds_are_listed(self):
        assert set(reporting_service.REPORT_KINDS) == {
            "profit-loss", "revenue", "expense", "salary", "inventory", "project",
        }
