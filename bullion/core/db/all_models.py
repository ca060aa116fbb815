# Import all models here so Base.metadata knows every table
# (used by Alembic autogenerate and by the test schema setup)

from bullion.core.db.base import Base, BaseModel, AuditMixin
from bullion.modules.parties.models import Party, CashBalance
from bullion.modules.stocks.models import Karat, MetalStock
from bullion.modules.drafts.models import Draft
from bullion.modules.registry.models import RegistryEntry
from bullion.modules.inventory_logs.models import InventoryLog
from bullion.modules.inventory.models import Inventory
from bullion.modules.fund_transfers.models import FundTransfer

# Export for easy importing
__all__ = [
    "Base",
    "BaseModel",
    "AuditMixin",
    "Party",
    "CashBalance",
    "Karat",
    "MetalStock",
    "Draft",
    "RegistryEntry",
    "InventoryLog",
    "Inventory",
    "FundTransfer",
]
