# Overview: Service-layer operations for reporting; read-only tabular reports over the ledger, stock and projects.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..decimal_utils import format_money, format_number, to_json_number
from ..domain import Transaction
from ..storage import EntityStore
from ..time_utils import first_of_month, parse_calendar_date, to_iso_date, today
from ..validation import ValidationError
from . import inventory_service, ledger_service, project_service


class ReportError(ValidationError):
    """Raised when report parameters are unusable (unknown kind, bad range)."""
    pass


REPORT_KINDS = ("profit-loss", "revenue", "expense", "salary", "inventory", "project")

# Matched case-insensitively against expense descriptions
SALARY_KEYWORDS = ("salary", "payroll", "employee", "راتب", "مرتبات", "موظف")

DEFAULT_CURRENCY = "EGP"


@dataclass
class Report:
    kind: str
    title: str
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)
    summary: dict = field(default_factory=dict)
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "title": self.title,
            "headers": list(self.headers),
            "rows": [list(r) for r in self.rows],
            "summary": dict(self.summary),
            "from": to_iso_date(self.date_from),
            "to": to_iso_date(self.date_to),
        }


def _parse_range(date_from, date_to) -> tuple[date, date]:
    try:
        start = parse_calendar_date(date_from)
        end = parse_calendar_date(date_to)
    except ValueError:
        raise ReportError("from/to must be YYYY-MM-DD dates")
    start = start or first_of_month()
    end = end or today()
    if start > end:
        raise ReportError("from must be on or before to")
    return start, end


def _ledger_rows(transactions, currency: str) -> list[list[str]]:
    return [
        [to_iso_date(tx.date), tx.description, format_money(tx.amount, currency)]
        for tx in transactions
    ]


def _is_salary(tx: Transaction) -> bool:
    text = tx.description.casefold()
    return any(keyword in text for keyword in SALARY_KEYWORDS)


def _profit_loss(store, start, end, currency) -> Report:
    totals = ledger_service.ledger_totals(store, date_from=start, date_to=end)
    return Report(
        kind="profit-loss",
        title="Profit & loss report",
        headers=["Item", "Amount"],
        rows=[
            ["Total revenue", format_money(totals.revenue, currency)],
            ["Total expenses", format_money(totals.expense, currency)],
            ["Net profit", format_money(totals.net, currency)],
        ],
        summary={
            "revenue": to_json_number(totals.revenue),
            "expense": to_json_number(totals.expense),
            "net": to_json_number(totals.net),
        },
    )


def _ledger_report(store, kind, start, end, currency) -> Report:
    tx_type = "revenue" if kind == "revenue" else "expense"
    transactions = ledger_service.list_transactions(store, date_from=start, date_to=end, tx_type=tx_type)
    if kind == "salary":
        transactions = [tx for tx in transactions if _is_salary(tx)]

    total = sum((tx.amount for tx in transactions), Decimal("0"))
    titles = {
        "revenue": "Revenue report",
        "expense": "Expense report",
        "salary": "Salary report",
    }
    return Report(
        kind=kind,
        title=titles[kind],
        headers=["Date", "Description", "Amount"],
        rows=_ledger_rows(transactions, currency),
        summary={"total": to_json_number(total), "count": len(transactions)},
    )


def _inventory(store) -> Report:
    items = inventory_service.list_items(store)
    rows = [
        [
            item.name,
            f"{format_number(item.quantity)} {item.unit}",
            format_number(item.min_quantity),
            "low" if inventory_service.is_low_stock(item) else "ok",
        ]
        for item in items
    ]
    return Report(
        kind="inventory",
        title="Inventory report",
        headers=["Item", "Quantity", "Minimum", "Status"],
        rows=rows,
        summary={
            "items": len(items),
            "low": sum(1 for item in items if inventory_service.is_low_stock(item)),
        },
    )


def _project(store, project_id, start, end, currency) -> Report:
    if not project_id:
        raise ValidationError("project_id is required for the project report")
    summary = project_service.project_summary(store, project_id, date_from=start, date_to=end)
    project = summary.project
    return Report(
        kind="project",
        title=f"Project report: {project.name}",
        headers=["Field", "Value"],
        rows=[
            ["Project", project.name],
            ["Location", project.location],
            ["Floors", str(project.floors)],
            ["Units", str(project.units)],
            ["Total costs", format_money(summary.total_costs, currency)],
            ["Total sales", format_money(summary.total_sales, currency)],
            ["Profit/loss", format_money(summary.profit, currency)],
        ],
        summary={
            "project": project.name,
            "total_costs": to_json_number(summary.total_costs),
            "total_sales": to_json_number(summary.total_sales),
            "profit": to_json_number(summary.profit),
        },
    )


def build_report(
    store: EntityStore,
    kind: str,
    *,
    date_from=None,
    date_to=None,
    project_id: Optional[str] = None,
    currency: str = DEFAULT_CURRENCY,
) -> Report:
    """
    Build one report. Read-only; calling it twice on unchanged data returns
    equal reports.

    The date range is inclusive and applies to ledger-based kinds and to the
    project's costs and sales. The inventory report covers all items.
    Unapproved transactions are included.
    """
    kind = (kind or "").strip().lower()
    if kind not in REPORT_KINDS:
        raise ReportError(f"Unknown report kind: {kind}. Use one of: {', '.join(REPORT_KINDS)}")
    start, end = _parse_range(date_from, date_to)

    if kind == "profit-loss":
        report = _profit_loss(store, start, end, currency)
    elif kind in ("revenue", "expense", "salary"):
        report = _ledger_report(store, kind, start, end, currency)
    elif kind == "inventory":
        report = _inventory(store)
    else:
        report = _project(store, project_id, start, end, currency)

    report.date_from = start
    report.date_to = end
    return report
