"""Event model: the only row the lifecycle engine mutates."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Integer, String, Uuid

from app.db.base import Base
from app.db.types import UTCDateTime


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_events_end_after_start"),
        CheckConstraint("max_participants > 0", name="ck_events_max_participants_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False, default="")

    status = Column(String(20), nullable=False, default="pending", index=True)  # EventStatus enum values
    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=False, index=True)
    max_participants = Column(Integer, nullable=False)

    # Lifecycle audit trail: set once, never cleared
    created_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    approved_at = Column(UTCDateTime, nullable=True)
    rejected_at = Column(UTCDateTime, nullable=True)

    updated_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
