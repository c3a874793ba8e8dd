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
from vital_registry.schemas.registration import (
    BirthRegistrationCreate,
    DeathRegistrationCreate,
    BirthRegistrationResponse,
    DeathRegistrationResponse,
    StatusUpdate,
    VerificationResult,
    RegistrationStats,
)
from vital_registry.schemas.document import DocumentMeta, DocumentResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "UserEnvelope",
    "VerifyEmailRequest",
    "EmailRequest",
    "ResetPasswordRequest",
    "MessageResponse",
    "BirthRegistrationCreate",
    "DeathRegistrationCreate",
    "BirthRegistrationResponse",
    "DeathRegistrationResponse",
    "StatusUpdate",
    "VerificationResult",
    "RegistrationStats",
    "DocumentMeta",
    "DocumentResponse",
]
