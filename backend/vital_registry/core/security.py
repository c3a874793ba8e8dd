from datetime import datetime, timedelta
from typing import Optional, Tuple
import hashlib
import hmac
import secrets

import bcrypt

from vital_registry.core.config import settings


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password"""
    if not hashed_password:
        return False
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def hash_token(token: str) -> str:
    """Keyed hash of a single-use token; only the hash is stored"""
    return hmac.new(
        settings.SECRET_KEY.encode('utf-8'),
        token.encode('utf-8'),
        hashlib.sha256,
    ).hexdigest()


def generate_expiring_token(lifetime: timedelta) -> Tuple[str, str, datetime]:
    """
    Generate a single-use token.

    Returns (raw_token, token_hash, expires_at). The raw token goes to the
    user; the hash and expiry are persisted.
    """
    token = secrets.token_urlsafe(32)
    return token, hash_token(token), datetime.utcnow() + lifetime


def generate_session_id() -> str:
    """Generate an unguessable session id for the session cookie"""
    return secrets.token_urlsafe(32)
