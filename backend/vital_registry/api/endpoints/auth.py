from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.config import settings
from vital_registry.core.database import get_db
from vital_registry.core.exceptions import AuthorizationError, ValidationError
from vital_registry.core.logging_config import logger, set_user_id
from vital_registry.core.rate_limiter import auth_rate_limit, strict_rate_limit
from vital_registry.modules.auth.dependencies import (
    get_current_user,
    set_session_cookie,
    clear_session_cookie,
)
from vital_registry.schemas.auth import (
    UserRegister,
    UserLogin,
    UserResponse,
    UserEnvelope,
    VerifyEmailRequest,
    EmailRequest,
    ResetPasswordRequest,
    MessageResponse,
)
from vital_registry.services.auth_service import AuthService
from vital_registry.services.credential_store import CredentialStore
from vital_registry.services.identity_cache import CurrentUser

router = APIRouter()


def user_response(user) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )


@router.post("/login", response_model=UserEnvelope)
@auth_rate_limit()
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Sign in and receive the session cookie"""
    client_ip = request.client.host if request.client else "unknown"

    user, sid = await AuthService(db).login(
        credentials.email,
        credentials.password,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip,
    )

    set_user_id(user.id)
    set_session_cookie(response, sid)
    return UserEnvelope(user=user_response(user))


@router.post("/register", response_model=UserEnvelope)
@strict_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Create an account. A verification email is sent; the account can sign in
    once the email is verified.
    """
    if user_data.role.value not in settings.SELF_REGISTRATION_ROLES:
        logger.log_auth_event(
            event="register",
            success=False,
            user_email=user_data.email,
            reason=f"Self-registration as '{user_data.role.value}' not allowed",
        )
        raise AuthorizationError(f"Cannot self-register with role '{user_data.role.value}'")

    user = await CredentialStore(db).register_user(
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        role=user_data.role,
    )
    return UserEnvelope(user=user_response(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Destroy the current session (if any) and clear the cookie"""
    await AuthService(db).logout(request.cookies.get(settings.SESSION_COOKIE_NAME))
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
async def get_current_user_info(
    current_user: CurrentUser = Depends(get_current_user)
):
    """Get current user info"""
    return user_response(current_user)


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    body: VerifyEmailRequest,
    db: AsyncSession = Depends(get_db)
):
    """Verify email address using the token from the verification email"""
    if not await CredentialStore(db).verify_email(body.token):
        raise ValidationError("Invalid or expired verification token", field="token")
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=MessageResponse)
@strict_rate_limit()
async def resend_verification_email(
    request: Request,
    body: EmailRequest,
    db: AsyncSession = Depends(get_db)
):
    # Same answer whether or not the account exists
    await CredentialStore(db).resend_verification_email(body.email)
    return MessageResponse(
        message="If the account exists and is not verified, a new verification email has been sent."
    )


@router.post("/forgot-password", response_model=MessageResponse)
@strict_rate_limit()
async def forgot_password(
    request: Request,
    body: EmailRequest,
    db: AsyncSession = Depends(get_db)
):
    """Request a password reset link"""
    await CredentialStore(db).request_password_reset(body.email)
    return MessageResponse(
        message="If an account with that email exists, you will receive password reset instructions."
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    if not await CredentialStore(db).reset_password(body.token, body.password):
        raise ValidationError("Invalid or expired reset token", field="token")
    return MessageResponse(message="Password has been reset successfully")
