"""
Identity Cache - resolved users keyed by user id

Session lookups resolve the session subject to a user on every request.
This cache keeps a small snapshot of that user so most requests skip the
users table.

- Bounded: least recently used entries are evicted past ``max_entries``
- Time-boxed: entries older than ``ttl_seconds`` count as misses
- Swept: a background task drops expired entries independent of traffic

Usage:
    user = identity_cache.get(user_id)
    if user is None:
        user = CurrentUser.from_user(await store.get_user_by_id(user_id))
        identity_cache.set(user)
"""

import asyncio
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Tuple

from vital_registry.core.config import settings
from vital_registry.core.logging_config import logger
from vital_registry.models.user import User, UserRole


@dataclass(frozen=True)
class CurrentUser:
    """Immutable snapshot of the signed-in user"""
    id: str
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    role: UserRole
    is_verified: bool = True

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=UserRole(user.role),
            is_verified=bool(user.is_verified),
        )

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


class IdentityCache:
    """Thread-safe LRU map of user id -> CurrentUser with TTL"""

    def __init__(
        self,
        ttl_seconds: int = settings.IDENTITY_CACHE_TTL_SECONDS,
        max_entries: int = settings.IDENTITY_CACHE_MAX_ENTRIES,
        sweep_interval: int = settings.IDENTITY_CACHE_SWEEP_INTERVAL_SECONDS,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.sweep_interval = sweep_interval
        self._entries: "OrderedDict[str, Tuple[CurrentUser, float]]" = OrderedDict()
        self._lock = threading.Lock()
        self._sweep_task: Optional[asyncio.Task] = None

    def get(self, user_id: str) -> Optional[CurrentUser]:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            user, stored_at = entry
            if now - stored_at > self.ttl_seconds:
                del self._entries[user_id]
                return None
            self._entries.move_to_end(user_id)
            return user

    def set(self, user: CurrentUser) -> None:
        with self._lock:
            self._entries[user.id] = (user, time.monotonic())
            self._entries.move_to_end(user.id)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def sweep(self) -> int:
        """
        Drop expired entries.

        Returns:
            Number of entries removed
        """
        now = time.monotonic()
        with self._lock:
            expired = [
                user_id for user_id, (_, stored_at) in self._entries.items()
                if now - stored_at > self.ttl_seconds
            ]
            for user_id in expired:
                del self._entries[user_id]

        if expired:
            logger.debug(f"Identity cache swept {len(expired)} expired entries")
        return len(expired)

    async def start_sweep_task(self) -> None:
        """Start background sweep task"""
        async def sweep_loop():
            while True:
                await asyncio.sleep(self.sweep_interval)
                try:
                    self.sweep()
                except Exception as e:
                    logger.error(f"Identity cache sweep error: {e}")

        self._sweep_task = asyncio.create_task(sweep_loop())
        logger.info("Started identity cache sweep background task")

    def stop_sweep_task(self) -> None:
        """Stop background sweep task"""
        if self._sweep_task:
            self._sweep_task.cancel()
            self._sweep_task = None


identity_cache = IdentityCache()
