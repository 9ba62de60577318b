"""Participant model: read-only input to notification fan-out."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint, Uuid

from app.db.base import Base
from app.db.types import UTCDateTime


class Participant(Base):
    __tablename__ = "event_participants"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_participants_event_user"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    joined_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
