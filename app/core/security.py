"""
Bearer-token authentication.

Provides:
- JWT token creation/verification (HS256, `sub` = user id, `role` claim)
- FastAPI dependencies for protected routes and per-route role allowlists
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from app.config import get_settings
from app.exceptions import AuthenticationError, ForbiddenError
from app.models.user import UserRole

settings = get_settings()

# Bearer token extractor; missing credentials are reported by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved from the bearer token."""
    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def create_access_token(
    user_id: UUID,
    role: UserRole,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create JWT access token."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode = {"sub": str(user_id), "role": role.value, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: CurrentUser = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = UUID(str(payload.get("sub")))
        role = UserRole(payload.get("role"))
    except ValueError:
        raise AuthenticationError("Invalid token claims")

    return CurrentUser(id=user_id, role=role)


def require_roles(*roles: UserRole):
    """Dependency factory - allow only the listed roles."""

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise ForbiddenError(
                f"Role {user.role.value} is not allowed to perform this action"
            )
        return user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
require_admin_or_client = require_roles(UserRole.ADMIN, UserRole.CLIENT)
