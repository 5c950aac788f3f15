from .ledger import TransactionRow
from .inventory import InventoryItemRow, MovementRow
from .projects import ProjectRow, ProjectCostRow, ProjectSaleRow
from .auth import User, SessionToken, ROLE_VALUES

__all__ = [
    'TransactionRow',
    'InventoryItemRow', 'MovementRow',
    'ProjectRow', 'ProjectCostRow', 'ProjectSaleRow',
    'User', 'SessionToken', 'ROLE_VALUES',
]
