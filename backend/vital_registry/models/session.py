from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Text
from datetime import datetime, timedelta

from vital_registry.core.database import Base
from vital_registry.core.types import GUID


class Session(Base):
    """Server-side login session; the cookie only carries ``sid``"""
    __tablename__ = "sessions"

    sid = Column(String(128), primary_key=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Serialized session payload
    data = Column(JSON, nullable=False, default=dict)

    expires_at = Column(DateTime, nullable=False, index=True)
    last_activity = Column(DateTime, default=datetime.utcnow)

    # Device/browser info
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def is_expired(self) -> bool:
        """Check if session is expired"""
        return datetime.utcnow() >= self.expires_at

    def extend(self, seconds: int):
        """Extend session expiration (rolling expiry)"""
        now = datetime.utcnow()
        self.expires_at = now + timedelta(seconds=seconds)
        self.last_activity = now

    def __repr__(self):
        return f"<Session user={self.user_id}>"
