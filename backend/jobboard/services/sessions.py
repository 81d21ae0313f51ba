"""
Session store: one rotating long-lived session record per identity.

Functions here never commit. They run inside the caller's transaction
(login, signup, logout, invalidation) so the whole flow is atomic.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.config import settings
from jobboard.database_types import utcnow
from jobboard.errors import NotFound
from jobboard.models.session_record import SessionRecord
from jobboard.models.user import User

logger = logging.getLogger(__name__)

# 32 random bytes = 256 bits of entropy
SESSION_TOKEN_BYTES = 32


def generate_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


async def lock_identity(db: AsyncSession, user_id: int) -> User:
    """
    Load a user row with SELECT FOR UPDATE.

    Serializes concurrent writers of the same identity (logins racing on the
    session record, revocation timestamp updates) on PostgreSQL.
    """
    result = await db.execute(
        select(User).where(User.id == user_id).with_for_update()
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFound(f"User {user_id} not found")
    return user


async def create_session(
    db: AsyncSession,
    user_id: int,
    now: Optional[datetime] = None
) -> SessionRecord:
    """
    Replace the identity's session record with a fresh one.

    Any existing record is deleted and flushed before the insert, so at most
    one live record exists per identity. Logging in elsewhere therefore
    kills the previous session token.

    Args:
        db: Database session (caller commits)
        user_id: Owning identity
        now: Issue instant; defaults to the current time

    Returns:
        The new, flushed SessionRecord
    """
    now = now or utcnow()
    await lock_identity(db, user_id)

    await db.execute(delete(SessionRecord).where(SessionRecord.user_id == user_id))
    await db.flush()

    record = SessionRecord(
        token=generate_session_token(),
        user_id=user_id,
        issued_at=now,
        expires_at=now + timedelta(days=settings.session_ttl_days),
    )
    db.add(record)
    await db.flush()

    logger.info(f"Session record rotated for user {user_id}", extra={"user_id": user_id})
    return record


async def find_session(db: AsyncSession, token: str) -> Optional[SessionRecord]:
    result = await db.execute(
        select(SessionRecord).where(SessionRecord.token == token)
    )
    return result.scalar_one_or_none()


async def delete_sessions_for_identity(db: AsyncSession, user_id: int) -> None:
    """Delete the identity's session record. No error if there is none."""
    await db.execute(delete(SessionRecord).where(SessionRecord.user_id == user_id))
    await db.flush()


async def delete_session(db: AsyncSession, record: SessionRecord) -> None:
    await db.delete(record)
    await db.flush()
