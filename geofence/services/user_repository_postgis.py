"""SQLAlchemy user repository."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from geofence.models import Region, User
from geofence.services.user_repository import UserRepository


class PostgisUserRepository(UserRepository):
    """User persistence through an AsyncSession; writes are flushed, not committed."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def region_ids(self, user_id: UUID) -> List[UUID]:
        result = await self.db.execute(
            select(Region.id).where(Region.owner_id == user_id).order_by(Region.created_at)
        )
        return list(result.scalars().all())
