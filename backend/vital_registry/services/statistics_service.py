"""Dashboard counters over both registration tables"""

from datetime import datetime
from typing import Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.models.registration import ApplicationStatus, BirthRegistration, DeathRegistration


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class StatisticsService:
    """Read-only aggregate counts"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *conditions) -> int:
        result = await self.db.execute(select(func.count()).select_from(model).where(*conditions))
        return result.scalar() or 0

    async def get_stats(self) -> Dict[str, int]:
        """
        Returns:
            pending_applications: pending births + pending deaths
            this_month_registrations: all approved records (cumulative, kept for
                existing dashboards)
            total_births / total_deaths: all records regardless of status
            approved_this_calendar_month: records approved since the first of
                the current UTC month
        """
        month_start = start_of_month(datetime.utcnow())

        pending = 0
        approved = 0
        approved_this_month = 0
        for model in (BirthRegistration, DeathRegistration):
            pending += await self._count(model, model.status == ApplicationStatus.PENDING)
            approved += await self._count(model, model.status == ApplicationStatus.APPROVED)
            approved_this_month += await self._count(
                model,
                model.status == ApplicationStatus.APPROVED,
                model.updated_at >= month_start,
            )

        return {
            "pending_applications": pending,
            "this_month_registrations": approved,
            "total_births": await self._count(BirthRegistration),
            "total_deaths": await self._count(DeathRegistration),
            "approved_this_calendar_month": approved_this_month,
        }
