"""User Directory — narrow read-only face of the external identity store.

Invariants:
    - Never creates, updates or authenticates users (registration is external)
    - Returns None for unknown ids (callers decide which typed error to raise)
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.domain_types import UserId
from account_market.models.user import User


class UserDirectoryService:
    """UserDirectory implementation backed by the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: UserId) -> User | None:
        return await self.db.get(User, user_id)

    async def exists(self, user_id: UserId) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None
