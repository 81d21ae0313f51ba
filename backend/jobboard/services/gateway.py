"""
Authentication gateway.

The only component with side effects on the session store and the
revocation clock. Per request it runs::

    NO_CREDENTIAL -> DECODING -> VERIFIED | REJECTED

and hands an explicit ``AuthenticatedIdentity`` to the caller, which passes
it on to the authorization policy and the services. Nothing is stored in
request-scoped globals.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database_types import utcnow
from jobboard.errors import (
    AccountDeactivated,
    BadCredentials,
    InvalidCredential,
    SessionExpired,
    SessionNotFound,
    SessionRevoked,
)
from jobboard.models.user import User, UserRole
from jobboard.services.credentials import get_credential_codec
from jobboard.services.passwords import verify_password
from jobboard.services.revocation import invalidate_all_authentication, is_revoked
from jobboard.services.sessions import create_session, delete_session, find_session, lock_identity

logger = logging.getLogger(__name__)


class GatewayState(str, enum.Enum):
    """Per-request authentication states"""
    NO_CREDENTIAL = "NO_CREDENTIAL"
    DECODING = "DECODING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Who is making the request, as of credential verification"""
    id: int
    email: str
    role: UserRole
    company_id: Optional[int]
    issued_at: datetime

    @classmethod
    def from_user(cls, user: User, issued_at: datetime) -> "AuthenticatedIdentity":
        return cls(
            id=user.id,
            email=user.email,
            role=UserRole(user.role),
            company_id=user.company_id,
            issued_at=issued_at,
        )


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    session_token: str
    user_id: int
    email: str


@dataclass(frozen=True)
class ReissueResult:
    access_token: str
    session_token: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _reject(reason: str, error: InvalidCredential) -> InvalidCredential:
    logger.warning(
        f"Access credential rejected: {reason}",
        extra={"gateway_state": GatewayState.REJECTED.value, "reason": reason}
    )
    return error


async def authenticate_request(
    db: AsyncSession,
    raw_credential: Optional[str],
    now: Optional[datetime] = None
) -> AuthenticatedIdentity:
    """
    Verify one request's access credential.

    Args:
        db: Database session
        raw_credential: Bearer token value, or None when the header is absent
        now: Verification instant; defaults to the current time

    Returns:
        AuthenticatedIdentity carrying id, role and company id

    Raises:
        InvalidCredential: Missing, expired, malformed, forged or revoked
            credential, unknown identity, or deactivated account
    """
    now = now or utcnow()

    # NO_CREDENTIAL
    if not raw_credential:
        raise _reject("missing", InvalidCredential("Authentication required. Missing bearer access credential."))

    # DECODING
    try:
        claims = get_credential_codec().verify(raw_credential, now=now)
    except InvalidCredential as e:
        raise _reject(e.kind.lower(), e)

    user = await db.get(User, claims.subject_id)
    if not user:
        raise _reject("unknown_subject", InvalidCredential("Invalid access credential."))

    if is_revoked(claims.issued_at, user.revocation_timestamp):
        raise _reject(
            "revoked",
            InvalidCredential("Session invalidated due to logout, deactivation, password or role change.")
        )

    if user.deleted:
        raise _reject("deactivated", InvalidCredential("Account is deactivated."))

    # VERIFIED
    return AuthenticatedIdentity.from_user(user, claims.issued_at)


async def login(db: AsyncSession, email: str, password: str) -> LoginResult:
    """
    Password login.

    Deactivated accounts are rejected; they come back only through the
    recovery flow. A successful login rotates the session record, so a
    previous session token (from any device) stops working.

    Raises:
        BadCredentials: Unknown email or wrong password
        AccountDeactivated: Correct password on a deactivated account
    """
    email = normalize_email(email)
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login attempt for {email}")
        raise BadCredentials("Invalid email or password.")

    if user.deleted:
        logger.warning(f"Login attempt on deactivated account: {email}")
        raise AccountDeactivated("Account deactivated. Please recover your account before logging in.")

    now = utcnow()
    record = await create_session(db, user.id, now=now)
    access_token = get_credential_codec().issue(user.id, issued_at=now)
    await db.commit()

    logger.info(f"Successful login: {user.email}", extra={"user_id": user.id})

    return LoginResult(
        access_token=access_token,
        session_token=record.token,
        user_id=user.id,
        email=user.email,
    )


async def logout(db: AsyncSession, user_id: int) -> None:
    """Delete the session record and revoke outstanding credentials atomically."""
    user = await lock_identity(db, user_id)
    await invalidate_all_authentication(db, user)
    await db.commit()

    logger.info(f"User logged out: {user.email}", extra={"user_id": user.id})


async def reissue_access_credential(
    db: AsyncSession,
    session_token: str,
    now: Optional[datetime] = None
) -> ReissueResult:
    """
    Exchange a session token for a fresh access credential.

    The session token itself is not rotated here (only on login).

    Raises:
        SessionNotFound: No record for this token
        SessionExpired: Record past its expiry (record is deleted)
        SessionRevoked: Record issued before the identity's revocation
            timestamp, or identity deactivated (record is deleted)
    """
    now = now or utcnow()
    record = await find_session(db, session_token)

    if not record:
        logger.warning("Session token not found on reissue")
        raise SessionNotFound("Session token not found.")

    if record.is_expired(now):
        await delete_session(db, record)
        await db.commit()
        logger.info(f"Expired session record removed for user {record.user_id}")
        raise SessionExpired("Session expired. Please log in again.")

    user = await db.get(User, record.user_id)
    revoked = (
        user is None
        or user.deleted
        or (user.revocation_timestamp is not None and record.issued_at < user.revocation_timestamp)
    )
    if revoked:
        await delete_session(db, record)
        await db.commit()
        logger.warning(f"Revoked session record removed for user {record.user_id}")
        raise SessionRevoked(
            "Session invalidated due to logout, deactivation, password or role change."
        )

    access_token = get_credential_codec().issue(user.id, issued_at=now)
    return ReissueResult(access_token=access_token, session_token=record.token)
