from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.database import get_db
from vital_registry.models.registration import RegistrationKind
from vital_registry.models.user import REVIEWER_ROLES
from vital_registry.modules.auth.dependencies import get_current_user, require_roles
from vital_registry.schemas.registration import (
    BirthRegistrationResponse,
    DeathRegistrationResponse,
    RegistrationStats,
)
from vital_registry.services.identity_cache import CurrentUser
from vital_registry.services.registration_service import RegistrationService
from vital_registry.services.statistics_service import StatisticsService

router = APIRouter()

RESPONSE_SCHEMAS = {
    RegistrationKind.BIRTH: BirthRegistrationResponse,
    RegistrationKind.DEATH: DeathRegistrationResponse,
}


@router.get("/statistics", response_model=RegistrationStats)
async def get_statistics(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    stats = await StatisticsService(db).get_stats()
    return RegistrationStats(**stats)


@router.get("/pending-applications")
async def get_pending_applications(
    reviewer: CurrentUser = Depends(require_roles(*REVIEWER_ROLES)),
    db: AsyncSession = Depends(get_db)
) -> List[Dict[str, Any]]:
    """Pending births and deaths, each tagged with ``type``, newest first"""
    pending = await RegistrationService(db).get_pending_applications()
    return [
        {
            **RESPONSE_SCHEMAS[kind].model_validate(record).model_dump(by_alias=True, mode="json"),
            "type": kind.value,
        }
        for kind, record in pending
    ]
