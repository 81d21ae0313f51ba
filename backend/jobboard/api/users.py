"""
User account endpoints.
Handles signup, personal details, password change, deactivation and recovery.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.api.auth import require_identity
from jobboard.database import get_db
from jobboard.schemas.auth import LoginResponse, MessageResponse
from jobboard.schemas.user import (
    ChangePasswordRequest,
    RecoveryCompleteRequest,
    RecoveryInitiateRequest,
    RecoveryInitiateResponse,
    SignupRequest,
    UserDetailsUpdate,
    UserResponse,
)
from jobboard.services import accounts
from jobboard.services.gateway import AuthenticatedIdentity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/signup", response_model=LoginResponse, status_code=201)
async def signup(
    request: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Create a candidate account and log it in."""
    result = await accounts.signup(db, request)
    return LoginResponse(
        access_token=result.access_token,
        session_token=result.session_token,
        user_id=result.user_id,
        email=result.email,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await accounts.get_identity(db, identity)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    request: UserDetailsUpdate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await accounts.update_details(db, identity, request)


@router.put("/me/password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Change password. All sessions and access tokens are invalidated."""
    await accounts.change_password(db, identity, request.old_password, request.new_password)
    return MessageResponse(message="Password changed. Please log in again.")


@router.delete("/me", response_model=MessageResponse)
async def deactivate_me(
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    await accounts.deactivate_account(db, identity)
    return MessageResponse(message="Account deactivated.")


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Read a user by id (self or admin)."""
    return await accounts.get_user(db, identity, user_id)


@router.post("/recovery/initiate", response_model=RecoveryInitiateResponse)
async def initiate_recovery(
    request: RecoveryInitiateRequest,
    db: AsyncSession = Depends(get_db)
):
    token = await accounts.initiate_recovery(db, request.email)
    return RecoveryInitiateResponse(
        message="Recovery token issued.",
        recovery_token=token,
    )


@router.post("/recovery/complete", response_model=MessageResponse)
async def complete_recovery(
    request: RecoveryCompleteRequest,
    db: AsyncSession = Depends(get_db)
):
    await accounts.complete_recovery(db, request.recovery_token, request.new_password)
    return MessageResponse(message="Account recovered. Please log in.")
