# Re-export all models for convenient imports
from vital_registry.models.user import REVIEWER_ROLES, User, UserRole
from vital_registry.models.session import Session
from vital_registry.models.registration import (
    ApplicationSequence,
    ApplicationStatus,
    BirthRegistration,
    DeathRegistration,
    RegistrationKind,
)
from vital_registry.models.document import Document

__all__ = [
    # User
    "User",
    "UserRole",
    "REVIEWER_ROLES",
    "Session",
    # Registrations
    "ApplicationStatus",
    "RegistrationKind",
    "BirthRegistration",
    "DeathRegistration",
    "ApplicationSequence",
    # Documents
    "Document",
]
