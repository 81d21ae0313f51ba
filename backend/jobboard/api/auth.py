"""
Authentication endpoints and the request gateway dependency.

``get_current_identity`` is installed as an app-wide dependency in
``jobboard.main``. It lets allow-listed public paths through and verifies
the bearer access credential on every other request. Routes receive the
verified identity through ``require_identity``; FastAPI caches the
dependency per request, so verification runs once.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.config import settings
from jobboard.database import get_db
from jobboard.errors import InvalidCredential
from jobboard.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RenewAccessTokenRequest,
    RenewAccessTokenResponse,
)
from jobboard.services import gateway
from jobboard.services.gateway import AuthenticatedIdentity

logger = logging.getLogger(__name__)
router = APIRouter()

bearer_scheme = HTTPBearer(auto_error=False)


def is_public_path(path: str) -> bool:
    """Exact-match lookup in the configured allow-list."""
    normalized = path.rstrip("/") or "/"
    return normalized in settings.public_paths


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[AuthenticatedIdentity]:
    """
    Gateway dependency for every request.

    Returns:
        None on public paths, otherwise the verified identity

    Raises:
        InvalidCredential: Missing or rejected access credential
    """
    if is_public_path(request.url.path):
        return None

    raw_credential = credentials.credentials if credentials else None
    return await gateway.authenticate_request(db, raw_credential)


async def require_identity(
    identity: Optional[AuthenticatedIdentity] = Depends(get_current_identity)
) -> AuthenticatedIdentity:
    """Route-level access to the identity verified by the gateway."""
    if identity is None:
        raise InvalidCredential("Authentication required.")
    return identity


# Endpoints
@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Password login.

    Returns:
        200: Access token and session token
        401: Unknown email or wrong password
        403: Account deactivated (use recovery)
    """
    result = await gateway.login(db, request.email, request.password)
    return LoginResponse(
        access_token=result.access_token,
        session_token=result.session_token,
        user_id=result.user_id,
        email=result.email,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Delete the session and revoke every access token issued so far."""
    await gateway.logout(db, identity.id)
    return MessageResponse(message="Logged out successfully")


@router.post("/renewAccessToken", response_model=RenewAccessTokenResponse)
async def renew_access_token(
    request: RenewAccessTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a live session token for a fresh access token."""
    result = await gateway.reissue_access_credential(db, request.session_token)
    return RenewAccessTokenResponse(
        access_token=result.access_token,
        session_token=result.session_token,
    )
