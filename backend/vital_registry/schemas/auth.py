from pydantic import EmailStr, Field, field_validator
from typing import Optional

from vital_registry.models.user import UserRole
from vital_registry.schemas.base import CamelModel


class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.PUBLIC

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserLogin(CamelModel):
    email: EmailStr
    password: str = ""

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole


class UserEnvelope(CamelModel):
    user: UserResponse


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1)


class EmailRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)


class MessageResponse(CamelModel):
    message: str
