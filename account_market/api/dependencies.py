"""Request Dependencies — caller identity and admin gate.

Invariants:
    - The caller id arrives in the X-User-Id header, set by the upstream
      authentication gateway (login is an external collaborator)
    - Admin routes resolve the caller through UserDirectory and require role=admin

Design Decisions:
    - Missing/non-integer header fails request validation (400), like any other field
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from account_market.core.domain_types import UserRole
from account_market.core.errors import AdminRequiredError
from account_market.infrastructure.database import get_db
from account_market.services.users import UserDirectoryService


async def get_current_user_id(x_user_id: int = Header(..., gt=0)) -> int:
    return x_user_id


async def require_admin(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> int:
    user = await UserDirectoryService(db).get_user(user_id)
    if user is None or user.role != UserRole.ADMIN:
        raise AdminRequiredError()
    return user_id
