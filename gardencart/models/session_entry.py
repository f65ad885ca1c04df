from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from gardencart.db import Base


class SessionEntry(Base):
    """One persisted session key (`token` or `user`)."""

    __tablename__ = "session_entries"
    key = Column(String(32), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
