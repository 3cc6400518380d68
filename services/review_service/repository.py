from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Review


class ReviewRepository:
    @staticmethod
    async def create(db: AsyncSession, review: Review) -> Review:
        db.add(review)
        await db.commit()
        await db.refresh(review)
        return review

    @staticmethod
    async def get(db: AsyncSession, review_id: int) -> Optional[Review]:
        result = await db.execute(select(Review).where(Review.id == review_id))
        return result.scalars().first()

    @staticmethod
    async def find_for_user_and_item(db: AsyncSession, user_id: int, item_id: int) -> Optional[Review]:
        result = await db.execute(
            select(Review).where(Review.user_id == user_id, Review.item_id == item_id)
        )
        return result.scalars().first()

    @staticmethod
    async def find_page(db: AsyncSession, conditions: list, order_by: list, offset: int, limit: int) -> Sequence[Review]:
        result = await db.execute(
            select(Review).where(*conditions).order_by(*order_by).offset(offset).limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def count(db: AsyncSession, conditions: list) -> int:
        result = await db.execute(select(func.count()).select_from(Review).where(*conditions))
        return result.scalar_one()

    @staticmethod
    async def rating_distribution(db: AsyncSession, item_id: int) -> dict[int, int]:
        result = await db.execute(
            select(Review.rating, func.count())
            .where(Review.item_id == item_id)
            .group_by(Review.rating)
        )
        return {rating: count for rating, count in result.all()}

    @staticmethod
    async def save(db: AsyncSession, review: Review) -> Review:
        db.add(review)
        await db.commit()
        await db.refresh(review)
        return review

    @staticmethod
    async def delete(db: AsyncSession, review: Review) -> None:
        await db.delete(review)
        await db.commit()
