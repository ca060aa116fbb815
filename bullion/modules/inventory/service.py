"""
InventoryService - per-stock confirmed holdings.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.exceptions import NotFoundError
from bullion.core.utils import ZERO, clamped_subtract, to_decimal
from bullion.modules.stocks.models import MetalStock
from .models import Inventory

logger = logging.getLogger(__name__)


class InventoryService:

    @staticmethod
    async def get_for_update(db: AsyncSession, stock_id: int) -> Optional[Inventory]:
        await db.flush()
        result = await db.execute(
            select(Inventory)
            .where(Inventory.stock_id == stock_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def add_confirmed(
        db: AsyncSession,
        stock: MetalStock,
        gross_weight: Decimal,
        pure_weight: Decimal,
        purity: Optional[Decimal],
        user_id: Optional[int] = None,
    ) -> Inventory:
        """
        Add a confirmed movement, creating the stock's row on first use.

        Args:
            purity: fraction recorded only when the row has none yet
        """
        inventory = await InventoryService.get_for_update(db, stock.id)

        if inventory is None:
            pcs_count = 0
            if stock.pcs:
                unit = to_decimal(stock.total_value) or ZERO
                pcs_count = int(gross_weight / (unit if unit > ZERO else Decimal("1")))

            inventory = Inventory(
                stock_id=stock.id,
                gross_weight=gross_weight,
                pure_weight=pure_weight,
                purity=purity,
                pcs=stock.pcs,
                pcs_count=pcs_count,
                created_by=user_id,
            )
            db.add(inventory)
            await db.flush()
            logger.info("Opened inventory for stock %s", stock.code)
            return inventory

        inventory.gross_weight = (to_decimal(inventory.gross_weight) or ZERO) + gross_weight
        inventory.pure_weight = (to_decimal(inventory.pure_weight) or ZERO) + pure_weight
        if inventory.purity is None and purity is not None:
            inventory.purity = purity
        inventory.updated_by = user_id
        await db.flush()
        return inventory

    @staticmethod
    async def remove_confirmed(
        db: AsyncSession,
        stock_id: int,
        gross_weight: Decimal,
        pure_weight: Decimal,
        user_id: Optional[int] = None,
    ) -> Optional[Inventory]:
        """Take a confirmed movement back out, floored at zero."""
        inventory = await InventoryService.get_for_update(db, stock_id)

        if inventory is None:
            logger.warning(
                "No inventory row for stock %s while removing %s g", stock_id, gross_weight
            )
            return None

        inventory.gross_weight = clamped_subtract(
            inventory.gross_weight, gross_weight, label=f"inventory gross of stock {stock_id}"
        )
        inventory.pure_weight = clamped_subtract(
            inventory.pure_weight, pure_weight, label=f"inventory pure of stock {stock_id}"
        )
        inventory.updated_by = user_id
        await db.flush()
        return inventory

    @staticmethod
    async def find_all(db: AsyncSession) -> List[Inventory]:
        result = await db.execute(
            select(Inventory)
            .where(Inventory.deleted_at.is_(None))
            .order_by(Inventory.stock_id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_by_stock(db: AsyncSession, stock_id: int) -> Inventory:
        result = await db.execute(
            select(Inventory).where(
                Inventory.stock_id == stock_id, Inventory.deleted_at.is_(None)
            )
        )
        inventory = result.scalar_one_or_none()
        if not inventory:
            raise NotFoundError("Inventory for stock", stock_id)
        return inventory
