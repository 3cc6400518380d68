from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User


class UserRepository:

    @staticmethod
    async def create(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        # Emails are stored lowercased
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalars().first()

    @staticmethod
    async def find_page(db: AsyncSession, conditions: list, offset: int, limit: int) -> Sequence[User]:
        result = await db.execute(
            select(User).where(*conditions).order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def count(db: AsyncSession, conditions: list) -> int:
        result = await db.execute(select(func.count()).select_from(User).where(*conditions))
        return result.scalar_one()

    @staticmethod
    async def save(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
