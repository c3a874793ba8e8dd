from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from vital_registry.core.config import settings
from vital_registry.core.database import get_db
from vital_registry.core.exceptions import AuthenticationError, AuthorizationError
from vital_registry.core.logging_config import set_user_id
from vital_registry.models.user import REVIEWER_ROLES, UserRole
from vital_registry.services.auth_service import AuthService
from vital_registry.services.identity_cache import CurrentUser


def set_session_cookie(response: Response, sid: str) -> None:
    """Issue (or re-issue) the session cookie with a fresh max age"""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sid,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


async def get_optional_user(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
) -> Optional[CurrentUser]:
    """Get current user (optional)"""
    sid = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not sid:
        return None

    user = await AuthService(db).current_user(sid)
    if user is None:
        return None

    request.state.user_id = user.id
    set_user_id(user.id)
    set_session_cookie(response, sid)
    return user


async def get_current_user(
    user: Optional[CurrentUser] = Depends(get_optional_user)
) -> CurrentUser:
    """Get current authenticated user"""
    if user is None:
        raise AuthenticationError()
    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory gating a route on the caller's role.

    Usage:
        @router.patch("/{id}/status")
        async def update(user: CurrentUser = Depends(require_roles(*REVIEWER_ROLES))):
            ...
    """
    allowed = frozenset(roles)

    async def role_checker(
        current_user: CurrentUser = Depends(get_current_user)
    ) -> CurrentUser:
        if not AuthService.require_role(current_user, allowed):
            raise AuthorizationError()
        return current_user

    return role_checker
