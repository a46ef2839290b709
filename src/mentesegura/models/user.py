"""
User model with bcrypt password hashing.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
import bcrypt

from mentesegura.models.conversation import Base


class User(Base):
    """Student account. Authenticated by email + password."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    conversations = relationship('Conversation', cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

    @staticmethod
    def hash_password(password: str, cost_factor: int = 12, min_length: int = 6) -> str:
        """
        Hash password using bcrypt with configurable cost factor.

        Args:
            password: Plaintext password to hash
            cost_factor: Bcrypt cost factor (4-31, default 12)
            min_length: Minimum accepted password length

        Returns:
            Bcrypt hash string (60 chars)
        """
        if not password or len(password) < min_length:
            raise ValueError(f"Password must be at least {min_length} characters")

        salt = bcrypt.gensalt(rounds=cost_factor)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def set_password(self, password: str, cost_factor: int = 12, min_length: int = 6) -> None:
        self.password_hash = self.hash_password(password, cost_factor, min_length)

    def verify_password(self, password: str) -> bool:
        """Verify password against stored hash."""
        if not password or not self.password_hash:
            return False

        try:
            return bcrypt.checkpw(
                password.encode('utf-8'),
                self.password_hash.encode('utf-8')
            )
        except (ValueError, AttributeError):
            return False

    def record_login(self, when: Optional[datetime] = None) -> None:
        self.last_login_at = when or datetime.now(timezone.utc)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email.split("@")[0]
