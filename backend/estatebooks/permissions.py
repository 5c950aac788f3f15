"""
Role Policy Definitions

Every role check in the application is answered here, so services and routes
never compare role strings themselves.

ROLES:
- manager:    full access; the only role that can approve ledger rows and list users
- accountant: ledger and reports; own entries are approved on creation
- employee:   day-to-day data entry; entries wait for manager approval

Policy checks take an Actor and return bool. require() turns a failed check
into PermissionDeniedError before any write happens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


# =============================================================================
# ROLES
# =============================================================================

ROLE_MANAGER = "manager"
ROLE_ACCOUNTANT = "accountant"
ROLE_EMPLOYEE = "employee"

ROLES = (ROLE_MANAGER, ROLE_ACCOUNTANT, ROLE_EMPLOYEE)


class PermissionDeniedError(Exception):
    """Raised when the actor's role does not allow an action."""
    pass


@dataclass(frozen=True)
class Actor:
    """The authenticated principal a service call runs on behalf of."""
    id: Optional[str]
    role: str

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, role=user.role)


# =============================================================================
# POLICY CHECKS
# =============================================================================

def auto_approves(actor: Actor) -> bool:
    """Entries created by managers and accountants are approved immediately."""
    return actor.role in (ROLE_MANAGER, ROLE_ACCOUNTANT)


def can_approve(actor: Actor) -> bool:
    return actor.role == ROLE_MANAGER


def can_manage_ledger(actor: Actor) -> bool:
    """View and delete ledger rows, view reports."""
    return actor.role in (ROLE_MANAGER, ROLE_ACCOUNTANT)


def can_manage_users(actor: Actor) -> bool:
    return actor.role == ROLE_MANAGER


def require(check: Callable[[Actor], bool], actor: Actor, action: str) -> None:
    if actor is None or not check(actor):
        role = actor.role if actor is not None else "anonymous"
        raise PermissionDeniedError(f"Role '{role}' may not {action}")
