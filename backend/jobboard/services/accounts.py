"""
Account lifecycle: signup, password change, deactivation and recovery.
"""
import logging
import re
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.config import settings
from jobboard.database_types import utcnow
from jobboard.errors import (
    BadCredentials,
    DuplicateResource,
    IllegalStateTransition,
    InvalidCredential,
    NotFound,
    ValidationFailed,
)
from jobboard.models.user import User, UserRole
from jobboard.schemas.user import SignupRequest, UserDetailsUpdate
from jobboard.services import policy
from jobboard.services.applications import withdraw_open_applications
from jobboard.services.companies import leave_company_on_deactivation
from jobboard.services.credentials import get_credential_codec
from jobboard.services.gateway import LoginResult, normalize_email
from jobboard.services.identities import find_active_user, find_user_by_email, lock_active_user
from jobboard.services.passwords import hash_password, verify_password
from jobboard.services.revocation import invalidate_all_authentication
from jobboard.services.sessions import create_session, lock_identity

logger = logging.getLogger(__name__)

# Optional 00 or + prefix, then 7-15 digits
PHONE_PATTERN = re.compile(r"^(00|\+)?\d{7,15}$")
# Strip spaces, dashes, dots and brackets users type into phone numbers
PHONE_NOISE = re.compile(r"[\s\-\.\(\)]")


def sanitize_phone_number(phone_number: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to ``+<digits>``.

    Returns None for an empty value.

    Raises:
        ValidationFailed: Not a plausible international number
    """
    if phone_number is None:
        return None
    cleaned = PHONE_NOISE.sub("", phone_number)
    if not cleaned:
        return None
    if not PHONE_PATTERN.match(cleaned):
        raise ValidationFailed("Invalid phone number.")
    if cleaned.startswith("00"):
        cleaned = cleaned[2:]
    return cleaned if cleaned.startswith("+") else f"+{cleaned}"


async def signup(db: AsyncSession, data: SignupRequest) -> LoginResult:
    """
    Register a candidate account and log it in.

    Raises:
        DuplicateResource: Email taken (kind EMAIL_DEACTIVATED when the
            holder is deactivated and should use recovery instead)
        ValidationFailed: Bad phone number
    """
    email = normalize_email(data.email)
    existing = await find_user_by_email(db, email)
    if existing:
        if existing.deleted:
            raise DuplicateResource(
                "An account with this email was deactivated. Recover it instead of signing up again.",
                kind="EMAIL_DEACTIVATED"
            )
        raise DuplicateResource("Email is already registered.")

    user = User(
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=email,
        password_hash=hash_password(data.password),
        phone_number=sanitize_phone_number(data.phone_number),
        role=UserRole.CANDIDATE,
        deleted=False,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateResource("Email is already registered.")

    now = utcnow()
    record = await create_session(db, user.id, now=now)
    access_token = get_credential_codec().issue(user.id, issued_at=now)
    await db.commit()

    logger.info(f"New user signed up: {email}", extra={"user_id": user.id})
    return LoginResult(
        access_token=access_token,
        session_token=record.token,
        user_id=user.id,
        email=user.email,
    )


async def get_identity(db: AsyncSession, actor) -> User:
    return await find_active_user(db, actor.id)


async def get_user(db: AsyncSession, actor, user_id: int) -> User:
    """
    Fetch another account. Users can read only themselves; admins anyone.

    Raises:
        Unauthorized: Not the user and not an admin
        NotFound: Missing or deactivated user
    """
    policy.ensure_self_or_admin(actor, user_id)
    return await find_active_user(db, user_id)


async def update_details(db: AsyncSession, actor, data: UserDetailsUpdate) -> User:
    """Update name and phone number. Email, role and password have their own flows."""
    user = await lock_active_user(db, actor.id)
    changes = data.model_dump(exclude_unset=True)

    if "phone_number" in changes:
        changes["phone_number"] = sanitize_phone_number(changes["phone_number"])
    for field in ("first_name", "last_name"):
        if changes.get(field) is not None:
            changes[field] = changes[field].strip()
        elif field in changes:
            del changes[field]

    for field, value in changes.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


async def change_password(db: AsyncSession, actor, old_password: str, new_password: str) -> None:
    """
    Replace the password and force a fresh login everywhere.

    Raises:
        BadCredentials: Old password does not match
        ValidationFailed: New password equals the old one
    """
    user = await lock_active_user(db, actor.id)

    if not verify_password(old_password, user.password_hash):
        logger.warning(f"Password change with wrong old password for user {user.id}")
        raise BadCredentials("Old password is incorrect.")
    if verify_password(new_password, user.password_hash):
        raise ValidationFailed("New password must be different from the old password.")

    user.password_hash = hash_password(new_password)
    await invalidate_all_authentication(db, user)
    await db.commit()

    logger.info(f"Password changed for user {user.id}", extra={"user_id": user.id})


async def deactivate_account(db: AsyncSession, actor) -> None:
    """
    Deactivate the actor's own account.

    Open applications are withdrawn. An employer's company is dissolved; a
    recruiter's jobs go to the employer. The account keeps its row and can
    come back through recovery.
    """
    user = await lock_active_user(db, actor.id)

    withdrawn = await withdraw_open_applications(db, user.id)
    await leave_company_on_deactivation(db, user)

    user.role = UserRole.CANDIDATE
    user.company_id = None
    user.deleted = True
    await invalidate_all_authentication(db, user)
    await db.commit()

    logger.info(
        f"Account deactivated: {user.email} ({withdrawn} applications withdrawn)",
        extra={"user_id": user.id}
    )


async def initiate_recovery(db: AsyncSession, email: str) -> str:
    """
    Issue a recovery token for a deactivated account.

    Returns:
        The recovery token

    Raises:
        NotFound: No account with this email
        IllegalStateTransition: The account is not deactivated
    """
    email = normalize_email(email)
    user = await find_user_by_email(db, email)
    if not user:
        raise NotFound("No account with this email.")
    user = await lock_identity(db, user.id)
    if not user.deleted:
        raise IllegalStateTransition("Account is active. Log in instead of recovering it.")

    token = secrets.token_urlsafe(32)
    user.recovery_token = token
    user.recovery_token_expires_at = utcnow() + timedelta(minutes=settings.recovery_token_ttl_minutes)
    await db.commit()

    if settings.email_mode == "dev":
        logger.info(f"Recovery token for {email}: {token}")
    else:
        logger.info(f"Recovery token issued for user {user.id}")
    return token


async def complete_recovery(db: AsyncSession, token: str, new_password: str) -> None:
    """
    Reactivate a deactivated account with a new password.

    The user logs in afterwards; no session is created here.

    Raises:
        InvalidCredential: Unknown or expired recovery token
        IllegalStateTransition: Account is not deactivated
        ValidationFailed: New password equals the old one
    """
    result = await db.execute(
        select(User).where(User.recovery_token == token).with_for_update()
    )
    user = result.scalar_one_or_none()
    now = utcnow()

    if not user or not user.has_valid_recovery_token(now):
        logger.warning("Invalid or expired recovery token presented")
        raise InvalidCredential("Invalid or expired recovery token.", kind="INVALID_RECOVERY_TOKEN")
    if not user.deleted:
        raise IllegalStateTransition("Account is not deactivated.")
    if verify_password(new_password, user.password_hash):
        raise ValidationFailed("New password must be different from the old password.")

    user.password_hash = hash_password(new_password)
    user.deleted = False
    user.recovery_token = None
    user.recovery_token_expires_at = None
    await invalidate_all_authentication(db, user, now)
    await db.commit()

    logger.info(f"Account recovered: {user.email}", extra={"user_id": user.id})
