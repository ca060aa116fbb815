"""
StocksService - metal stock and karat master data.
"""

import re
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.exceptions import ConflictError, NotFoundError, ValidationError
from bullion.core.utils import normalize_purity, to_decimal
from .models import Karat, MetalStock
from .schemas import CreateKaratDto, CreateStockDto

KARAT_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")


class StocksService:

    @staticmethod
    def karat_number(stock: Optional[MetalStock]) -> Optional[Decimal]:
        """Numeric part of the stock's karat code ("22K" -> 22), or None"""
        if stock is None or stock.karat is None:
            return None
        match = KARAT_NUMBER.match(stock.karat.karat_code or "")
        return to_decimal(match.group(1)) if match else None

    @staticmethod
    async def create_karat(db: AsyncSession, create_dto: CreateKaratDto) -> Karat:
        try:
            purity = normalize_purity(create_dto.standard_purity)
        except ValueError as exc:
            raise ValidationError(str(exc))

        karat = Karat(
            karat_code=create_dto.karat_code.upper(),
            description=create_dto.description,
            standard_purity=purity,
        )
        try:
            async with db.begin_nested():
                db.add(karat)
                await db.flush()
        except IntegrityError:
            raise ConflictError(f"Karat {create_dto.karat_code} already exists")

        await db.refresh(karat)
        return karat

    @staticmethod
    async def find_all_karats(db: AsyncSession) -> List[Karat]:
        result = await db.execute(
            select(Karat).where(Karat.deleted_at.is_(None)).order_by(Karat.karat_code)
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_karat(db: AsyncSession, karat_id: int) -> Karat:
        result = await db.execute(
            select(Karat).where(Karat.id == karat_id, Karat.deleted_at.is_(None))
        )
        karat = result.scalar_one_or_none()
        if not karat:
            raise NotFoundError("Karat", karat_id)
        return karat

    @staticmethod
    async def create(
        db: AsyncSession, create_dto: CreateStockDto, user_id: Optional[int] = None
    ) -> MetalStock:
        """
        Create a metal stock item.

        Raises:
            NotFoundError: karat_id does not exist
            ConflictError: stock code already used
        """
        if create_dto.karat_id is not None:
            await StocksService.find_karat(db, create_dto.karat_id)

        try:
            purity = normalize_purity(create_dto.standard_purity)
        except ValueError as exc:
            raise ValidationError(str(exc))

        data = create_dto.model_dump()
        data["standard_purity"] = purity
        stock = MetalStock(**data, created_by=user_id)

        try:
            async with db.begin_nested():
                db.add(stock)
                await db.flush()
        except IntegrityError:
            raise ConflictError(f"Stock code {create_dto.code} is already in use")

        await db.refresh(stock)
        return stock

    @staticmethod
    async def find_all(db: AsyncSession, search: Optional[str] = None) -> List[MetalStock]:
        query = (
            select(MetalStock)
            .where(MetalStock.deleted_at.is_(None))
            .order_by(MetalStock.code)
        )
        if search:
            query = query.where(
                MetalStock.code.ilike(f"%{search}%")
                | MetalStock.description.ilike(f"%{search}%")
            )
        result = await db.execute(query)
        return list(result.scalars().unique().all())

    @staticmethod
    async def find_one(db: AsyncSession, stock_id: int) -> MetalStock:
        """
        Raises:
            NotFoundError: If stock not found or is soft-deleted
        """
        result = await db.execute(
            select(MetalStock).where(
                MetalStock.id == stock_id, MetalStock.deleted_at.is_(None)
            )
        )
        stock = result.scalar_one_or_none()

        if not stock:
            raise NotFoundError("Stock", stock_id)

        return stock
