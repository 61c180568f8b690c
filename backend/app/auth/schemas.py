"""
Auth Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.auth.models import UserRole


# ── Request Schemas ──
class LoginRequest(BaseModel):
    email: str
    password: str


class CreateUserRequest(BaseModel):
    email: str
    password: str
    full_name: str
    role: UserRole = UserRole.FAMILY_VIEWER


# ── Response Schemas ──
class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
