from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime
import enum

from vital_registry.core.database import Base
from vital_registry.core.types import GUID, generate_uuid, value_enum


class UserRole(str, enum.Enum):
    """User roles"""
    PUBLIC = "public"
    HEALTH_WORKER = "health_worker"
    REGISTRAR = "registrar"
    ADMIN = "admin"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # Null for pre-authorized identities, which never sign in with a password
    hashed_password = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)

    role = Column(value_enum(UserRole, "user_role"), default=UserRole.PUBLIC, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Email verification fields
    verification_token_hash = Column(String(255), nullable=True, index=True)
    verification_token_expires = Column(DateTime, nullable=True)

    # Password reset fields
    reset_token_hash = Column(String(255), nullable=True, index=True)
    reset_token_expires = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email}>"


# Roles allowed to review applications and see every submission
REVIEWER_ROLES = frozenset({UserRole.ADMIN, UserRole.REGISTRAR})
