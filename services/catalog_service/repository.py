from typing import Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import CatalogItem


class CatalogRepository:

    @staticmethod
    async def create(db: AsyncSession, item: CatalogItem) -> CatalogItem:
        db.add(item)
        await db.commit()
        await db.refresh(item)
        return item

    @staticmethod
    async def find_by_id(db: AsyncSession, item_id: int) -> Optional[CatalogItem]:
        result = await db.execute(select(CatalogItem).where(CatalogItem.id == item_id))
        return result.scalars().first()

    @staticmethod
    async def find_by_title(db: AsyncSession, title: str) -> Optional[CatalogItem]:
        result = await db.execute(select(CatalogItem).where(CatalogItem.title == title))
        return result.scalars().first()

    @staticmethod
    async def find_page(db: AsyncSession, conditions: list, order_by: list, offset: int, limit: int) -> Sequence[CatalogItem]:
        result = await db.execute(
            select(CatalogItem).where(*conditions).order_by(*order_by).offset(offset).limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def count(db: AsyncSession, conditions: list) -> int:
        result = await db.execute(select(func.count()).select_from(CatalogItem).where(*conditions))
        return result.scalar_one()

    @staticmethod
    async def category_counts(db: AsyncSession) -> list[tuple[str, int]]:
        result = await db.execute(
            select(CatalogItem.category, func.count())
            .group_by(CatalogItem.category)
            .order_by(CatalogItem.category)
        )
        return [(category, count) for category, count in result.all()]

    @staticmethod
    async def distinct_values(db: AsyncSession, column) -> list[str]:
        result = await db.execute(
            select(column).distinct().where(column.is_not(None)).order_by(column)
        )
        return list(result.scalars().all())

    @staticmethod
    async def save(db: AsyncSession, item: CatalogItem) -> CatalogItem:
        db.add(item)
        await db.commit()
        await db.refresh(item)
        return item

    @staticmethod
    async def decrement_stock(db: AsyncSession, item_id: int, quantity: int) -> None:
        # No stock >= quantity guard here; concurrent placements can oversell.
        await db.execute(
            update(CatalogItem)
            .where(CatalogItem.id == item_id)
            .values(stock=CatalogItem.stock - quantity)
        )
        await db.commit()

    @staticmethod
    async def restore_stock(db: AsyncSession, item_id: int, quantity: int) -> bool:
        result = await db.execute(
            update(CatalogItem)
            .where(CatalogItem.id == item_id)
            .values(stock=CatalogItem.stock + quantity)
        )
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def delete(db: AsyncSession, item_id: int) -> bool:
        result = await db.execute(delete(CatalogItem).where(CatalogItem.id == item_id))
        await db.commit()
        return result.rowcount > 0
