"""Pydantic schemas for authentication requests and responses."""

from datetime import datetime
from pydantic import BaseModel, EmailStr
from typing import Optional


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    """Refresh token request schema."""
    refresh_token: str


class TokenResponse(BaseModel):
    """Token response schema."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user_id: str
    email: str
    is_admin: bool = False


class UserResponse(BaseModel):
    """User response schema."""
    id: str
    email: str
    is_admin: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
