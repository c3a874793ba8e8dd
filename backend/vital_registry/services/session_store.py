"""
Durable login sessions stored in the ``sessions`` table.

The cookie carries only the session id. Expiry is rolling: every
authenticated request pushes ``expires_at`` forward by the session max age.
"""

import asyncio
from datetime import datetime
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.config import settings
from vital_registry.core.database import AsyncSessionLocal
from vital_registry.core.logging_config import logger
from vital_registry.core.security import generate_session_id
from vital_registry.models.session import Session


class SessionStore:
    """CRUD over login sessions for one database session"""

    def __init__(self, db: AsyncSession, max_age_seconds: int = settings.SESSION_MAX_AGE_SECONDS):
        self.db = db
        self.max_age_seconds = max_age_seconds

    async def create(
        self,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Session:
        session = Session(
            sid=generate_session_id(),
            user_id=user_id,
            data={"userId": user_id},
            user_agent=user_agent,
            ip_address=ip_address,
        )
        session.extend(self.max_age_seconds)
        self.db.add(session)
        await self.db.commit()
        return session

    async def get(self, sid: Optional[str]) -> Optional[Session]:
        """Return the session if it exists and has not expired"""
        if not sid:
            return None
        result = await self.db.execute(select(Session).where(Session.sid == sid))
        session = result.scalar_one_or_none()
        if session is None or session.is_expired():
            return None
        return session

    async def touch(self, session: Session) -> None:
        session.extend(self.max_age_seconds)
        await self.db.commit()

    async def destroy(self, sid: Optional[str]) -> Optional[str]:
        """
        Delete a session.

        Returns:
            The user id the session belonged to, if any
        """
        if not sid:
            return None
        result = await self.db.execute(select(Session).where(Session.sid == sid))
        session = result.scalar_one_or_none()
        if session is None:
            return None
        user_id = session.user_id
        await self.db.delete(session)
        await self.db.commit()
        return user_id

    async def prune_expired(self) -> int:
        result = await self.db.execute(
            delete(Session).where(Session.expires_at <= datetime.utcnow())
        )
        await self.db.commit()
        return result.rowcount or 0


class SessionPruner:
    """Background task that deletes expired session rows"""

    def __init__(self, interval_seconds: int = settings.SESSION_PRUNE_INTERVAL_SECONDS):
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    async def prune_once(self) -> int:
        async with AsyncSessionLocal() as db:
            removed = await SessionStore(db).prune_expired()
        if removed:
            logger.info(f"Pruned {removed} expired sessions")
        return removed

    async def start(self) -> None:
        async def prune_loop():
            while True:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.prune_once()
                except Exception as e:
                    logger.error(f"Session prune task error: {e}")

        self._task = asyncio.create_task(prune_loop())
        logger.info("Started session prune background task")

    def stop(self) -> None:
        if self._task:
            self._task.cancel()
            self._task = None


session_pruner = SessionPruner()
