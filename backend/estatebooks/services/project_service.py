# Overview: Service-layer operations for real-estate projects, their costs and unit sales.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from ..decimal_utils import quantize_money, to_json_number
from ..domain import (
    PROJECT_COST_TYPES,
    SOURCE_PROJECT_COST,
    SOURCE_PROJECT_SALE,
    Project,
    ProjectCost,
    ProjectSale,
    Transaction,
)
from ..permissions import Actor
from ..storage import EntityStore
from ..time_utils import today
from ..validation import (
    ValidationError,
    coerce_choice,
    coerce_date,
    coerce_optional_text,
    coerce_positive_decimal,
    coerce_positive_int,
    coerce_text,
)
from . import ledger_service
"""
Project Invariants (authoritative)

- A ProjectCost always has one paired expense Transaction of the same amount;
  a ProjectSale always has one paired revenue Transaction of its price.
- Creating or deleting a cost/sale writes the record and its ledger row in one
  store.atomic() unit.
- Deleting a project deletes its costs and sales through the same path, so the
  ledger loses exactly the rows those records produced.
- Sales are not capped by Project.units; project_summary reports the gap.
"""


# =============================================================================
# PROJECTS
# =============================================================================

def create_project(store: EntityStore, *, name: str, location: str, floors, units) -> Project:
    project = Project(
        name=coerce_text(name, "name"),
        location=coerce_text(location, "location"),
        floors=coerce_positive_int(floors, "floors"),
        units=coerce_positive_int(units, "units"),
    )
    return store.create(project)


def get_project(store: EntityStore, project_id: str) -> Project:
    return store.get_or_raise(Project, project_id, "Project")


def list_projects(store: EntityStore) -> list[Project]:
    return store.find(Project)


def list_project_costs(store: EntityStore, project_id: Optional[str] = None) -> list[ProjectCost]:
    if project_id:
        get_project(store, project_id)
        return store.find(ProjectCost, project_id=project_id)
    return store.find(ProjectCost)


def list_project_sales(store: EntityStore, project_id: Optional[str] = None) -> list[ProjectSale]:
    if project_id:
        get_project(store, project_id)
        return store.find(ProjectSale, project_id=project_id)
    return store.find(ProjectSale)


def delete_project(store: EntityStore, project_id: str) -> None:
    project = get_project(store, project_id)
    with store.atomic():
        for cost in store.find(ProjectCost, project_id=project.id):
            _delete_cost(store, cost, project)
        for sale in store.find(ProjectSale, project_id=project.id):
            _delete_sale(store, sale, project)
        store.delete(Project, project.id)


# =============================================================================
# COSTS
# =============================================================================

def add_project_cost(
    store: EntityStore,
    actor: Actor,
    *,
    project_id: str,
    cost_type: str,
    amount,
    date=None,
    note: Optional[str] = None,
) -> tuple[ProjectCost, Transaction]:
    """Returns (cost, paired transaction)."""
    cost_type = coerce_choice(*PROJECT_COST_TYPES)(cost_type, "type")
    amount = quantize_money(coerce_positive_decimal(amount, "amount"))
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    cost_date = coerce_date(date, "date") if date is not None else today()
    note = coerce_optional_text(note, "note")
    project = get_project(store, project_id)

    with store.atomic():
        cost = store.create(ProjectCost(
            project_id=project.id,
            type=cost_type,
            amount=amount,
            date=cost_date,
            note=note,
        ))
        tx = ledger_service.post_paired_transaction(
            store,
            actor,
            tx_type="expense",
            description=ledger_service.describe_project_cost(cost_type=cost_type, project_name=project.name),
            amount=amount,
            tx_date=cost_date,
            source_kind=SOURCE_PROJECT_COST,
            source_id=cost.id,
        )
    return cost, tx


def _delete_cost(store: EntityStore, cost: ProjectCost, project: Project) -> None:
    ledger_service.remove_paired_transaction(
        store,
        source_kind=SOURCE_PROJECT_COST,
        source_id=cost.id,
        tx_type="expense",
        description=ledger_service.describe_project_cost(cost_type=cost.type, project_name=project.name),
        amount=cost.amount,
        tx_date=cost.date,
    )
    store.delete(ProjectCost, cost.id)


def delete_project_cost(store: EntityStore, cost_id: str) -> None:
    cost = store.get_or_raise(ProjectCost, cost_id, "Project cost")
    project = get_project(store, cost.project_id)
    with store.atomic():
        _delete_cost(store, cost, project)


# =============================================================================
# SALES
# =============================================================================

def add_project_sale(
    store: EntityStore,
    actor: Actor,
    *,
    project_id: str,
    unit_no,
    buyer: str,
    price,
    date=None,
    terms: Optional[str] = None,
) -> tuple[ProjectSale, Transaction]:
    """Returns (sale, paired transaction)."""
    unit_no = coerce_text(unit_no, "unit_no")
    buyer = coerce_text(buyer, "buyer")
    price = quantize_money(coerce_positive_decimal(price, "price"))
    if price <= 0:
        raise ValidationError("price must be > 0")
    sale_date = coerce_date(date, "date") if date is not None else today()
    terms = coerce_optional_text(terms, "terms")
    project = get_project(store, project_id)

    with store.atomic():
        sale = store.create(ProjectSale(
            project_id=project.id,
            unit_no=unit_no,
            buyer=buyer,
            price=price,
            date=sale_date,
            terms=terms,
        ))
        tx = ledger_service.post_paired_transaction(
            store,
            actor,
            tx_type="revenue",
            description=ledger_service.describe_project_sale(
                unit_no=unit_no, project_name=project.name, buyer=buyer,
            ),
            amount=price,
            tx_date=sale_date,
            source_kind=SOURCE_PROJECT_SALE,
            source_id=sale.id,
        )
    return sale, tx


def _delete_sale(store: EntityStore, sale: ProjectSale, project: Project) -> None:
    ledger_service.remove_paired_transaction(
        store,
        source_kind=SOURCE_PROJECT_SALE,
        source_id=sale.id,
        tx_type="revenue",
        description=ledger_service.describe_project_sale(
            unit_no=sale.unit_no, project_name=project.name, buyer=sale.buyer,
        ),
        amount=sale.price,
        tx_date=sale.date,
    )
    store.delete(ProjectSale, sale.id)


def delete_project_sale(store: EntityStore, sale_id: str) -> None:
    sale = store.get_or_raise(ProjectSale, sale_id, "Project sale")
    project = get_project(store, sale.project_id)
    with store.atomic():
        _delete_sale(store, sale, project)


# =============================================================================
# SUMMARY
# =============================================================================

@dataclass(frozen=True)
class ProjectSummary:
    project: Project
    total_costs: Decimal
    total_sales: Decimal
    units_sold: int

    @property
    def profit(self) -> Decimal:
        return self.total_sales - self.total_costs

    @property
    def units_remaining(self) -> int:
        # Negative when more units were sold than the project declares
        return self.project.units - self.units_sold

    def to_dict(self) -> dict:
        return {
            "project": self.project.to_dict(),
            "totalCosts": to_json_number(self.total_costs),
            "totalSales": to_json_number(self.total_sales),
            "profit": to_json_number(self.profit),
            "unitsSold": self.units_sold,
            "unitsRemaining": self.units_remaining,
        }


def project_summary(
    store: EntityStore,
    project_id: str,
    *,
    date_from: Optional[date_type] = None,
    date_to: Optional[date_type] = None,
) -> ProjectSummary:
    """Totals over the project's costs and sales, optionally limited to an inclusive date range."""
    project = get_project(store, project_id)
    costs = store.find(ProjectCost, project_id=project.id, date_from=date_from, date_to=date_to)
    sales = store.find(ProjectSale, project_id=project.id, date_from=date_from, date_to=date_to)
    return ProjectSummary(
        project=project,
        total_costs=quantize_money(sum((c.amount for c in costs), Decimal("0"))),
        total_sales=quantize_money(sum((s.price for s in sales), Decimal("0"))),
        units_sold=len(sales),
    )
