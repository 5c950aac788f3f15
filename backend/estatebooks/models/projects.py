from __future__ import annotations

from ..extensions import db
from ..domain import Project, ProjectCost, ProjectSale
from .base import RecordRowMixin


class ProjectRow(RecordRowMixin, db.Model):
    """Real-estate project. units is the sellable capacity (not enforced against sales)."""
    __tablename__ = "projects"
    record_type = Project

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    floors = db.Column(db.Integer, nullable=False)
    units = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<ProjectRow id={self.id} name={self.name!r}>"


class ProjectCostRow(RecordRowMixin, db.Model):
    """Cost booked against a project; always paired with one expense transaction."""
    __tablename__ = "project_costs"
    __table_args__ = (
        db.Index("ix_project_costs_project_date", "project_id", "date"),
    )
    record_type = ProjectCost

    id = db.Column(db.String(36), primary_key=True)
    project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    date = db.Column(db.Date, nullable=False)
    note = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())


class ProjectSaleRow(RecordRowMixin, db.Model):
    """Unit sale within a project; always paired with one revenue transaction."""
    __tablename__ = "project_sales"
    __table_args__ = (
        db.Index("ix_project_sales_project_date", "project_id", "date"),
    )
    record_type = ProjectSale

    id = db.Column(db.String(36), primary_key=True)
    project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=False, index=True)
    unit_no = db.Column(db.String(64), nullable=False)
    buyer = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Numeric(14, 2), nullable=False)
    date = db.Column(db.Date, nullable=False)
    terms = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
