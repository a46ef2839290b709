"""
Authentication Middleware — FastAPI dependency for JWT validation.
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import structlog

from mentesegura.errors import MissingCredentialError
from mentesegura.models.user import User
from mentesegura.services.auth_service import AuthService, get_auth_service

log = structlog.get_logger()

# auto_error=False so a missing header is reported through MissingCredentialError
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Get current authenticated user from the bearer token.

    Usage in route:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}

    Raises:
        MissingCredentialError (401) if the header is missing, the token is
        invalid or expired, or the account no longer exists
    """
    if credentials is None:
        raise MissingCredentialError("No authorization header")

    payload = auth_service.validate_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise MissingCredentialError()

    user = await auth_service.get_user_by_id(payload["sub"])
    if user is None or not user.is_active:
        log.info("auth_rejected", reason="user_missing_or_inactive", user_id=payload["sub"])
        raise MissingCredentialError()

    return user
