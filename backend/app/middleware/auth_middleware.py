"""
JWT-based authentication middleware.
The workflow only consumes "who is calling, and with what role".
"""
from uuid import UUID

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.auth.service import decode_access_token
from app.core.errors import AuthorizationFailure

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """Extract and validate JWT token from Authorization header."""
    if credentials is None:
        raise AuthorizationFailure("Not authenticated", status_code=401)
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError, TypeError) as exc:
        raise AuthorizationFailure("Invalid or expired token", status_code=401) from exc
    return {"user_id": user_id, "role": payload.get("role")}


def require_role(*roles: str):
    """Dependency factory: check if current user has one of the required roles."""
    async def role_checker(current_user: dict = Depends(get_current_user)):
        if current_user["role"] not in roles:
            raise AuthorizationFailure(f"Required role: {', '.join(roles)}")
        return current_user
    return role_checker


def get_request_meta(request: Request) -> dict:
    """Caller IP and user agent, captured on approvals for non-repudiation."""
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = (
        forwarded.split(",")[0].strip() if forwarded
        else request.headers.get("x-real-ip")
        or (request.client.host if request.client else None)
    )
    return {
        "ip_address": ip_address,
        "user_agent": request.headers.get("user-agent"),
    }
