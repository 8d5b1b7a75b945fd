"""User repository abstract base class.

Auth routes and the bearer-token dependency go through this interface, so
registration and login never hold a raw session.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from geofence.models.user import User


class UserRepository(ABC):
    """Abstract base class for user persistence backends."""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persist a new user and return it with id and timestamps populated."""
        ...

    @abstractmethod
    async def region_ids(self, user_id: UUID) -> List[UUID]:
        """Ids of the regions owned by the user, oldest first."""
        ...
