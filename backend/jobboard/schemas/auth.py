"""Authentication-related Pydantic schemas."""
from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    """Request body for password login."""
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Response after successful authentication."""
    access_token: str
    session_token: str
    token_type: str = "bearer"
    user_id: int
    email: str


class RenewAccessTokenRequest(BaseModel):
    """Request to exchange a session token for a new access token."""
    session_token: str


class RenewAccessTokenResponse(BaseModel):
    access_token: str
    session_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str
