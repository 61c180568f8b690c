"""
Auth API endpoints: login, admin user creation, get current user.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AuthorizationFailure, NotFoundFailure, ValidationFailure
from app.database.postgresql import get_db
from app.auth import service
from app.auth.schemas import (
    LoginRequest,
    CreateUserRequest,
    TokenResponse,
    UserResponse,
)
from app.middleware.auth_middleware import get_current_user, require_role

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate user and return JWT token."""
    user = await service.authenticate(db, data.email, data.password)
    if not user:
        raise AuthorizationFailure("Invalid email or password", status_code=401)
    if not user.is_active:
        raise AuthorizationFailure("Account is deactivated")

    token = service.create_access_token(str(user.id), user.role)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: CreateUserRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(require_role("admin")),
):
    """Create a user with a workflow role (translator, foreign lawyer, ...)."""
    existing = await service.get_user_by_email(db, data.email)
    if existing:
        raise ValidationFailure("Email already registered", status_code=status.HTTP_409_CONFLICT)

    user = await service.create_user(db, data)
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: dict = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Get current authenticated user info."""
    user = await service.get_user_by_id(db, current_user["user_id"])
    if not user:
        raise NotFoundFailure("User not found")
    return UserResponse.model_validate(user)
