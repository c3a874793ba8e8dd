from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.database import get_db
from vital_registry.schemas.registration import VerificationResult
from vital_registry.services.verification_service import VerificationService

router = APIRouter()


@router.get(
    "/verify/{certificate_number}",
    response_model=VerificationResult,
    response_model_exclude_none=True,
)
async def verify_certificate(
    certificate_number: str,
    db: AsyncSession = Depends(get_db)
):
    """Public certificate lookup; no session required"""
    result = await VerificationService(db).verify(certificate_number)
    return VerificationResult(**result)
