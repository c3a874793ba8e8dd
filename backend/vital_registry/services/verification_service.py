"""Public certificate verification"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.config import settings
from vital_registry.core.logging_config import logger
from vital_registry.models.registration import ApplicationStatus
from vital_registry.services.registration_service import KINDS, RegistrationService


class VerificationService:

    def __init__(self, db: AsyncSession):
        self.registrations = RegistrationService(db)

    async def verify(self, certificate_number: str) -> Dict[str, Any]:
        """
        Look up a certificate number, birth records first.

        Only approved records verify. Anything else, including a match on a
        pending or rejected record, yields ``{"valid": False}`` with no details.
        """
        certificate_number = (certificate_number or "").strip()
        if certificate_number:
            for kind, config in KINDS.items():
                record = await self.registrations.get_by_certificate_number(kind, certificate_number)
                if record is not None and record.status == ApplicationStatus.APPROVED:
                    logger.info(f"Certificate {certificate_number} verified ({config.certificate_label})")
                    return {
                        "valid": True,
                        "type": config.certificate_label,
                        "application_id": record.application_id,
                        "issued_date": record.updated_at or record.created_at,
                        "issuing_office": settings.ISSUING_OFFICE,
                    }

        logger.info(f"Certificate {certificate_number or '-'} not valid")
        return {"valid": False}
