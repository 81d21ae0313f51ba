"""User account Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from jobboard.models.user import UserRole


class SignupRequest(BaseModel):
    """Request body for creating a candidate account."""
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    phone_number: Optional[str] = None


class UserDetailsUpdate(BaseModel):
    """Request body for updating personal details."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    phone_number: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(min_length=8, max_length=128)


class RecoveryInitiateRequest(BaseModel):
    email: EmailStr


class RecoveryInitiateResponse(BaseModel):
    """Recovery token is returned directly (no email delivery)."""
    message: str
    recovery_token: str


class RecoveryCompleteRequest(BaseModel):
    recovery_token: str
    new_password: str = Field(min_length=8, max_length=128)


class UserResponse(BaseModel):
    """Response with a user's account details."""
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    role: UserRole
    company_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
