"""
Pre-authorized identities.

Operational and test accounts listed in ``PREAUTHORIZED_IDENTITIES_STR``
(``email:role,email:role``) sign in without a password and always receive
their listed role. The list is read once at import and cannot be changed
at runtime.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from vital_registry.core.config import settings
from vital_registry.core.logging_config import logger
from vital_registry.models.user import UserRole


def load_preauthorized_identities(raw: Dict[str, str]) -> Mapping[str, UserRole]:
    identities = {}
    for email, role in raw.items():
        try:
            identities[email] = UserRole(role)
        except ValueError:
            logger.warning(f"Ignoring pre-authorized identity {email}: unknown role '{role}'")
    return MappingProxyType(identities)


PREAUTHORIZED_IDENTITIES: Mapping[str, UserRole] = load_preauthorized_identities(
    settings.PREAUTHORIZED_IDENTITIES
)


def preauthorized_role(email: str, identities: Optional[Mapping[str, UserRole]] = None) -> Optional[UserRole]:
    """Role for a pre-authorized email, or None when the email is not listed"""
    if identities is None:
        identities = PREAUTHORIZED_IDENTITIES
    return identities.get((email or "").strip().lower())
