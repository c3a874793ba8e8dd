from vital_registry.services.email_service import EmailService, email_service
from vital_registry.services.identity_cache import CurrentUser, IdentityCache, identity_cache
from vital_registry.services.session_store import SessionStore, session_pruner
from vital_registry.services.credential_store import CredentialStore
from vital_registry.services.auth_service import AuthService
from vital_registry.services.registration_service import RegistrationService
from vital_registry.services.verification_service import VerificationService
from vital_registry.services.statistics_service import StatisticsService
from vital_registry.services.document_service import DocumentService
from vital_registry.services.blob_store import BlobStore, blob_store

__all__ = [
    # Auth
    "CurrentUser",
    "IdentityCache",
    "identity_cache",
    "SessionStore",
    "session_pruner",
    "CredentialStore",
    "AuthService",
    # Registrations
    "RegistrationService",
    "VerificationService",
    "StatisticsService",
    # Documents
    "DocumentService",
    "BlobStore",
    "blob_store",
    # Notifications
    "EmailService",
    "email_service",
]
