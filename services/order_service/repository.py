from typing import Optional, Sequence

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Order


class OrderRepository:
    @staticmethod
    async def insert(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def find_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    @staticmethod
    async def find_by_customer(db: AsyncSession, user_id: int, offset: int, limit: int) -> Sequence[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.customer_user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def count_by_customer(db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count()).select_from(Order).where(Order.customer_user_id == user_id)
        )
        return result.scalar_one()

    @staticmethod
    async def find_page(db: AsyncSession, conditions: list, offset: int, limit: int) -> Sequence[Order]:
        result = await db.execute(
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def count(db: AsyncSession, conditions: list) -> int:
        result = await db.execute(select(func.count()).select_from(Order).where(*conditions))
        return result.scalar_one()

    @staticmethod
    async def totals_by_customer(db: AsyncSession, user_ids: list[int]) -> dict[int, tuple[int, float]]:
        """user_id -> (order count, sum of paid order totals)."""
        if not user_ids:
            return {}
        paid_total = case((Order.is_paid.is_(True), Order.total_price), else_=0)
        result = await db.execute(
            select(Order.customer_user_id, func.count(Order.id), func.coalesce(func.sum(paid_total), 0))
            .where(Order.customer_user_id.in_(user_ids))
            .group_by(Order.customer_user_id)
        )
        return {user_id: (count, float(spent)) for user_id, count, spent in result.all()}

    @staticmethod
    async def save(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def delete(db: AsyncSession, order_id: int) -> bool:
        order = await OrderRepository.find_by_id(db, order_id)
        if not order:
            return False
        await db.delete(order)
        await db.commit()
        return True
