"""Identity lookups shared by the account, company and job services."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.errors import NotFound
from jobboard.models.user import User
from jobboard.services.sessions import lock_identity


async def find_active_user(db: AsyncSession, user_id: int) -> User:
    """Fetch a non-deactivated user or raise NotFound."""
    user = await db.get(User, user_id)
    if not user or user.deleted:
        raise NotFound("User not found.")
    return user


async def lock_active_user(db: AsyncSession, user_id: int) -> User:
    """Like find_active_user, but row-locked for a read-modify-write."""
    user = await lock_identity(db, user_id)
    if user.deleted:
        raise NotFound("User not found.")
    return user


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()
