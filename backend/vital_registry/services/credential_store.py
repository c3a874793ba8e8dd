"""
Credential Store - users, password hashes and single-use account tokens.

Verification and reset tokens are random strings handed to the user by
email. Only their keyed hash is stored, together with an expiry; a token is
cleared as soon as it is consumed.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.config import settings
from vital_registry.core.exceptions import ConflictError
from vital_registry.core.logging_config import logger
from vital_registry.core.security import (
    verify_password,
    get_password_hash,
    hash_token,
    generate_expiring_token,
)
from vital_registry.models.user import User, UserRole
from vital_registry.services.email_service import email_service
from vital_registry.services.identity_cache import identity_cache

UPSERT_FIELDS = (
    "email",
    "hashed_password",
    "first_name",
    "last_name",
    "role",
    "is_verified",
)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class CredentialStore:
    """User persistence and credential checks"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def upsert_user(self, data: Dict[str, Any]) -> User:
        """
        Insert a user, or overwrite every known field of an existing one.

        ``data`` is keyed by column name; ``id`` selects the row. The cached
        identity for that id is dropped so the next request re-resolves it.
        """
        user_id = data.get("id")
        user = await self.get_user_by_id(user_id) if user_id else None

        if user is None:
            user = User(id=user_id) if user_id else User()
            self.db.add(user)

        for field in UPSERT_FIELDS:
            if field in data:
                value = data[field]
                if field == "email":
                    value = normalize_email(value)
                elif field == "role":
                    value = UserRole(value)
                setattr(user, field, value)
        user.updated_at = datetime.utcnow()

        await self._commit_unique_email(user.email, event="upsert_user")
        await self.db.refresh(user)
        identity_cache.invalidate(str(user.id))
        return user

    async def register_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.PUBLIC,
    ) -> User:
        """Create an unverified account and send its verification link"""
        email = normalize_email(email)
        if await self.get_user_by_email(email):
            logger.log_auth_event(
                event="register",
                success=False,
                user_email=email,
                reason="Email already registered",
            )
            raise ConflictError("Email already registered")

        token, token_hash, expires_at = generate_expiring_token(
            timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS)
        )
        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=UserRole(role),
            is_verified=False,
            verification_token_hash=token_hash,
            verification_token_expires=expires_at,
        )
        self.db.add(user)
        await self._commit_unique_email(email, event="register")
        await self.db.refresh(user)

        logger.log_auth_event(
            event="register",
            success=True,
            user_email=email,
            user_role=user.role.value,
        )

        await self._notify_verification(user, token)
        return user

    async def validate_credentials(self, email: str, password: str) -> Optional[User]:
        """Return the user when the password matches, else None (unknown email included)"""
        user = await self.get_user_by_email(email)
        if user is None:
            return None
        if not verify_password(password or "", user.hashed_password):
            return None
        return user

    async def verify_email(self, token: str) -> bool:
        if not token:
            return False
        result = await self.db.execute(
            select(User).where(User.verification_token_hash == hash_token(token))
        )
        user = result.scalar_one_or_none()
        if user is None:
            return False
        if user.verification_token_expires is None or user.verification_token_expires < datetime.utcnow():
            logger.log_auth_event(
                event="verify_email",
                success=False,
                user_email=user.email,
                reason="Token expired",
            )
            return False

        user.is_verified = True
        user.verification_token_hash = None
        user.verification_token_expires = None
        await self.db.commit()
        identity_cache.invalidate(str(user.id))

        logger.log_auth_event(event="verify_email", success=True, user_email=user.email)
        return True

    async def resend_verification_email(self, email: str) -> None:
        user = await self.get_user_by_email(email)
        if user is None or user.is_verified:
            return

        token, token_hash, expires_at = generate_expiring_token(
            timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS)
        )
        user.verification_token_hash = token_hash
        user.verification_token_expires = expires_at
        await self.db.commit()

        await self._notify_verification(user, token)

    async def request_password_reset(self, email: str) -> None:
        user = await self.get_user_by_email(email)
        if user is None:
            return

        token, token_hash, expires_at = generate_expiring_token(
            timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES)
        )
        user.reset_token_hash = token_hash
        user.reset_token_expires = expires_at
        await self.db.commit()

        logger.log_auth_event(event="password_reset_requested", success=True, user_email=user.email)

        try:
            await email_service.send_password_reset_email(
                to_email=user.email,
                user_name=user.first_name,
                reset_token=token,
            )
        except Exception as e:
            logger.warning(f"[Auth] Failed to send password reset email: {e}")

    async def reset_password(self, token: str, new_password: str) -> bool:
        if not token:
            return False
        result = await self.db.execute(
            select(User).where(User.reset_token_hash == hash_token(token))
        )
        user = result.scalar_one_or_none()
        if user is None:
            return False
        if user.reset_token_expires is None or user.reset_token_expires < datetime.utcnow():
            logger.log_auth_event(
                event="password_reset",
                success=False,
                user_email=user.email,
                reason="Token expired",
            )
            return False

        user.hashed_password = get_password_hash(new_password)
        user.reset_token_hash = None
        user.reset_token_expires = None
        user.updated_at = datetime.utcnow()
        await self.db.commit()

        logger.log_auth_event(event="password_reset", success=True, user_email=user.email)
        return True

    async def _notify_verification(self, user: User, token: str) -> None:
        # Don't fail the caller if email fails
        try:
            await email_service.send_verification_email(
                to_email=user.email,
                user_name=user.first_name,
                verification_token=token,
            )
            logger.info(f"[Auth] Verification email sent to {user.email}")
        except Exception as e:
            logger.warning(f"[Auth] Failed to send verification email: {e}")

    async def _commit_unique_email(self, email: str, event: str) -> None:
        """Commit, turning a lost race on the unique email index into a ConflictError"""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.log_auth_event(
                event=event,
                success=False,
                user_email=email,
                reason="Email already registered",
            )
            raise ConflictError("Email already registered")
