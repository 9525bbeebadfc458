"""
Authentication Utility - JWT handling and owner dependencies.

Provides:
- JWT token creation/verification
- FastAPI dependencies that turn a bearer token into a Principal and then
  into the caller's own College/Student/Recruiter document
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import get_settings
from app.core.errors import Unauthorized
from app.db.mongodb import get_database
from app.models.principal import Principal
from app.models.status import Role
from app.services.ownership_service import resolve_owner

settings = get_settings()

# Bearer token extractor; missing header is reported through our envelope
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Principal:
    """
    FastAPI dependency - Get the authenticated principal.

    Usage:
        @app.get("/protected")
        async def route(principal: Principal = Depends(get_current_principal)):
            return principal
    """
    if credentials is None:
        raise Unauthorized("Missing bearer token")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise Unauthorized()

    user_id = payload.get("sub")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthorized("Token carries no known role")
    if not user_id:
        raise Unauthorized()

    return Principal(user_id=str(user_id), role=role)


async def get_current_college(
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> dict:
    """Dependency - Require college role and load the caller's college."""
    return await resolve_owner(db, principal, Role.college)


async def get_current_student(
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> dict:
    """Dependency - Require student role and load the caller's student profile."""
    return await resolve_owner(db, principal, Role.student)


async def get_current_recruiter(
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> dict:
    """Dependency - Require recruiter role and load the caller's recruiter profile."""
    return await resolve_owner(db, principal, Role.recruiter)
