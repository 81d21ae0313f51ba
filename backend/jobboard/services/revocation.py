"""
Revocation clock: server-driven invalidation of still-valid credentials.

Each identity carries a nullable ``revocation_timestamp``. Any access
credential issued at or before it is rejected, even inside its TTL.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database_types import utcnow
from jobboard.models.user import User
from jobboard.services.sessions import delete_sessions_for_identity

logger = logging.getLogger(__name__)


def invalidate_now(user: User, now: Optional[datetime] = None) -> datetime:
    """Set the user's revocation timestamp to ``now`` and return it."""
    now = now or utcnow()
    user.revocation_timestamp = now
    return now


def is_revoked(issued_at: datetime, revocation_timestamp: Optional[datetime]) -> bool:
    """True when a credential issued at ``issued_at`` is no longer trusted."""
    if revocation_timestamp is None:
        return False
    return issued_at <= revocation_timestamp


async def invalidate_all_authentication(
    db: AsyncSession,
    user: User,
    now: Optional[datetime] = None
) -> None:
    """
    Kill the session record and every outstanding access credential.

    Used by logout, password change, deactivation, recovery, and role or
    company membership changes that must force a fresh login. ``user`` must
    be loaded in ``db``; the caller commits.
    """
    await delete_sessions_for_identity(db, user.id)
    invalidated_at = invalidate_now(user, now)
    logger.info(
        f"Authentication invalidated for user {user.id}",
        extra={"user_id": user.id, "revocation_timestamp": invalidated_at.isoformat()}
    )
