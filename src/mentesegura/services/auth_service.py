"""
Authentication Service — JWT generation, validation and password verification.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import structlog

from jose import JWTError, jwt
from sqlalchemy import select

from mentesegura.config import get_config
from mentesegura.models.user import User
from mentesegura.services.database import get_session

log = structlog.get_logger()


class AuthService:
    """Issues and validates access tokens for student accounts."""

    def __init__(self):
        self.cfg = get_config()
        self.secret_key = self._resolve_secret_key()
        self.algorithm = self.cfg.auth.jwt_algorithm
        self.access_expire_minutes = self.cfg.auth.jwt_access_expiry_minutes
        self.bcrypt_rounds = self.cfg.auth.bcrypt_rounds
        self.min_password_length = self.cfg.auth.min_password_length

    def _resolve_secret_key(self) -> str:
        key = self.cfg.app.secret_key
        if not key or len(key) < 32:
            raise ValueError(
                "APP_SECRET_KEY must be set and at least 32 characters. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(48))'"
            )
        return key

    def create_access_token(self, user_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "type": "access",
            "exp": now + timedelta(minutes=self.access_expire_minutes),
            "iat": now,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def validate_access_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify and decode an access token.

        Returns:
            Decoded payload if valid, None otherwise
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            log.warning("jwt_verification_failed", error=str(e))
            return None

        if payload.get("type") != "access":
            log.warning("token_type_mismatch", actual=payload.get("type"))
            return None
        return payload

    async def register_user(self, email: str, password: str, full_name: Optional[str] = None) -> Optional[User]:
        """
        Create a new account.

        Returns:
            Created User, or None if the email is already registered

        Raises:
            ValueError: If the password is too short
        """
        email = email.strip().lower()
        async with get_session() as session:
            result = await session.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none():
                log.info("register_failed", reason="email_exists")
                return None

            user = User(id=str(uuid.uuid4()), email=email, full_name=full_name)
            user.set_password(password, cost_factor=self.bcrypt_rounds, min_length=self.min_password_length)
            session.add(user)
            await session.flush()

            log.info("user_created", user_id=user.id)
            return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        async with get_session() as session:
            result = await session.execute(select(User).where(User.email == email.strip().lower()))
            user = result.scalar_one_or_none()

            if not user:
                log.info("auth_failed", reason="user_not_found")
                return None

            if not user.is_active:
                log.info("auth_failed", reason="user_inactive", user_id=user.id)
                return None

            if not user.verify_password(password):
                log.info("auth_failed", reason="invalid_password", user_id=user.id)
                return None

            user.record_login()
            log.info("auth_success", user_id=user.id)
            return user

    async def login(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Authenticate and return a token response dict, or None."""
        user = await self.authenticate_user(email, password)
        if not user:
            return None
        return {
            "access_token": self.create_access_token(user.id, user.email),
            "token_type": "bearer",
            "expires_in": self.access_expire_minutes * 60,
            "user_id": user.id,
            "full_name": user.full_name,
        }

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        async with get_session() as session:
            result = await session.execute(select(User).where(User.id == str(user_id)))
            return result.scalar_one_or_none()


_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get singleton AuthService instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
