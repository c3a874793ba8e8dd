"""
Auth Service - login, logout, session resolution and role checks.

Login order:
1. Pre-authorized identities (no password, fixed role)
2. Email + password against the credential store
3. Unverified accounts are refused even with a correct password
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.exceptions import ConflictError, InvalidCredentialsError, EmailNotVerifiedError
from vital_registry.core.logging_config import logger
from vital_registry.models.user import User, UserRole
from vital_registry.modules.auth.preauthorized import PREAUTHORIZED_IDENTITIES, preauthorized_role
from vital_registry.services.credential_store import CredentialStore, normalize_email
from vital_registry.services.identity_cache import CurrentUser, IdentityCache, identity_cache
from vital_registry.services.session_store import SessionStore


class AuthService:
    """Session-based authentication for one database session"""

    def __init__(
        self,
        db: AsyncSession,
        cache: IdentityCache = identity_cache,
        preauthorized: Optional[Mapping[str, UserRole]] = None,
    ):
        self.db = db
        self.credentials = CredentialStore(db)
        self.sessions = SessionStore(db)
        self.cache = cache
        self.preauthorized = PREAUTHORIZED_IDENTITIES if preauthorized is None else preauthorized

    async def login(
        self,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Tuple[CurrentUser, str]:
        """
        Authenticate and open a session.

        Returns:
            (signed-in user snapshot, session id)

        Raises:
            InvalidCredentialsError: unknown email or wrong password
            EmailNotVerifiedError: correct password, unverified account
        """
        email = normalize_email(email)

        role = preauthorized_role(email, self.preauthorized)
        if role is not None:
            user = await self._ensure_preauthorized_user(email, role)
            logger.log_auth_event(
                event="login",
                success=True,
                user_email=email,
                method="preauthorized",
                user_role=role.value,
                client_ip=ip_address,
            )
        else:
            user = await self.credentials.validate_credentials(email, password)
            if user is None:
                logger.log_auth_event(
                    event="login",
                    success=False,
                    user_email=email,
                    reason="Invalid credentials",
                    client_ip=ip_address,
                )
                raise InvalidCredentialsError()
            if not user.is_verified:
                logger.log_auth_event(
                    event="login",
                    success=False,
                    user_email=email,
                    reason="Email not verified",
                    client_ip=ip_address,
                )
                raise EmailNotVerifiedError()
            logger.log_auth_event(
                event="login",
                success=True,
                user_email=email,
                method="password",
                client_ip=ip_address,
            )

        user.last_login = datetime.utcnow()
        await self.db.commit()

        session = await self.sessions.create(
            user_id=str(user.id),
            user_agent=user_agent,
            ip_address=ip_address,
        )

        current = CurrentUser.from_user(user)
        self.cache.set(current)
        return current, session.sid

    async def logout(self, sid: Optional[str]) -> None:
        user_id = await self.sessions.destroy(sid)
        if user_id:
            self.cache.invalidate(str(user_id))
            logger.log_auth_event(event="logout", success=True, user_id=str(user_id))

    async def current_user(self, sid: Optional[str]) -> Optional[CurrentUser]:
        """Resolve a session id to its user and extend the session"""
        session = await self.sessions.get(sid)
        if session is None:
            return None

        user_id = str(session.user_id)
        current = self.cache.get(user_id)
        if current is None:
            user = await self.credentials.get_user_by_id(user_id)
            if user is None:
                return None
            current = CurrentUser.from_user(user)
            self.cache.set(current)

        await self.sessions.touch(session)
        return current

    @staticmethod
    def require_role(user: Optional[CurrentUser], allowed_roles: Iterable[UserRole]) -> bool:
        if user is None:
            return False
        return user.role in set(allowed_roles)

    async def _ensure_preauthorized_user(self, email: str, role: UserRole) -> User:
        user = await self.credentials.get_user_by_email(email)
        if user is None:
            local_part = email.split("@", 1)[0]
            try:
                return await self.credentials.upsert_user({
                    "email": email,
                    "first_name": local_part,
                    "last_name": None,
                    "role": role,
                    "is_verified": True,
                })
            except ConflictError:
                # A concurrent sign-in created the row first
                user = await self.credentials.get_user_by_email(email)
                if user is None:
                    raise
        if user.role != role or not user.is_verified:
            return await self.credentials.upsert_user({
                "id": str(user.id),
                "role": role,
                "is_verified": True,
            })
        return user
