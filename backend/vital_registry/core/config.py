from pydantic_settings import BaseSettings
from typing import List, Dict, Any
from pathlib import Path
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_csv(v: Any) -> List[str]:
    """Parse a comma-separated setting (or JSON list) into a list of strings"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in v.split(',') if item.strip()]
    return []


def parse_identity_roles(v: str) -> Dict[str, str]:
    """Parse identities from environment variable format: email1:role,email2:role"""
    if not v:
        return {}
    identities = {}
    for item in v.split(','):
        if ':' in item:
            email, role = item.strip().rsplit(':', 1)
            identities[email.strip().lower()] = role.strip()
    return identities


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Vital Records Registry"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str
    ISSUING_OFFICE: str = "Accra Registry"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    BCRYPT_ROUNDS: int = 12  # 4 for tests (fast), 12 for prod (secure)
    VERIFICATION_TOKEN_TTL_HOURS: int = 24
    RESET_TOKEN_TTL_MINUTES: int = 60

    # Sessions (server-side, cookie carries only the session id)
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_MAX_AGE_SECONDS: int = 86400  # 24 hours, rolling
    SESSION_COOKIE_SECURE: bool = False
    SESSION_PRUNE_INTERVAL_SECONDS: int = 900

    # Identity cache (session subject -> resolved user)
    IDENTITY_CACHE_TTL_SECONDS: int = 300
    IDENTITY_CACHE_MAX_ENTRIES: int = 10000
    IDENTITY_CACHE_SWEEP_INTERVAL_SECONDS: int = 60

    # Operational/test identities that sign in without a password: email:role,email:role
    PREAUTHORIZED_IDENTITIES_STR: str = ""

    # Roles a user may pick when signing up
    SELF_REGISTRATION_ROLES_STR: str = "public,health_worker"

    @property
    def PREAUTHORIZED_IDENTITIES(self) -> Dict[str, str]:
        return parse_identity_roles(self.PREAUTHORIZED_IDENTITIES_STR)

    @property
    def SELF_REGISTRATION_ROLES(self) -> List[str]:
        return parse_csv(self.SELF_REGISTRATION_ROLES_STR)

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "noreply@registry.gov.gh"
    EMAIL_FROM_NAME: str = "Vital Records Registry"

    # SendGrid Configuration (preferred when an API key is set)
    SENDGRID_API_KEY: str = ""
    USE_SENDGRID: bool = True

    # Links in emails point here
    FRONTEND_URL: str = "http://localhost:3000"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    LOGIN_RATE_LIMIT: str = "5/minute"
    REGISTER_RATE_LIMIT: str = "3/minute"

    # ==========================================
    # File Upload
    # ==========================================
    MAX_UPLOAD_SIZE: int = 5242880  # 5MB
    MAX_REQUEST_SIZE: int = 10485760  # 10MB, checked by middleware before parsing
    ALLOWED_MIME_TYPES_STR: str = "image/jpeg,image/png,application/pdf"
    UPLOAD_PATH: str = "uploads"

    @property
    def ALLOWED_MIME_TYPES(self) -> List[str]:
        """Parse allowed MIME types from comma-separated string"""
        return parse_csv(self.ALLOWED_MIME_TYPES_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._upload_dir = Path(self.UPLOAD_PATH)
        self._upload_dir.mkdir(exist_ok=True, parents=True)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def UPLOAD_DIR(self) -> Path:
        return self._upload_dir

    def get_verification_url(self, token: str) -> str:
        return f"{self.FRONTEND_URL}/verify?token={token}"

    def get_password_reset_url(self, token: str) -> str:
        return f"{self.FRONTEND_URL}/reset-password?token={token}"


settings = Settings()
