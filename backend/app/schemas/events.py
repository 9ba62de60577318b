"""Pydantic schemas for event lifecycle and status report endpoints."""

from datetime import date as Date
from datetime import datetime

from pydantic import AwareDatetime, BaseModel, Field

from app.domain.lifecycle import EventStatus
from app.domain.reconstruction import DayStatusBucket, ReportStatus


class CreateEventRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    start_time: AwareDatetime
    end_time: AwareDatetime
    max_participants: int = Field(..., gt=0)


class TransitionRequest(BaseModel):
    """Request body for PATCH /events/{id}/status."""

    status: EventStatus


class EventResponse(BaseModel):
    id: str
    creator_id: str
    title: str
    status: EventStatus
    start_time: datetime
    end_time: datetime
    max_participants: int
    created_at: datetime
    approved_at: datetime | None = None
    rejected_at: datetime | None = None

    @classmethod
    def from_event(cls, event) -> "EventResponse":
        return cls(
            id=str(event.id),
            creator_id=event.creator_id,
            title=event.title,
            status=EventStatus(event.status),
            start_time=event.start_time,
            end_time=event.end_time,
            max_participants=event.max_participants,
            created_at=event.created_at,
            approved_at=event.approved_at,
            rejected_at=event.rejected_at,
        )


class DayStatusBucketResponse(BaseModel):
    """One day of the status report. Every day is present, zeros included."""

    date: Date
    pending: int = 0
    active: int = 0
    completed: int = 0
    rejected: int = 0

    @classmethod
    def from_bucket(cls, bucket: DayStatusBucket) -> "DayStatusBucketResponse":
        return cls(
            date=bucket.date,
            pending=bucket.counts[ReportStatus.PENDING],
            active=bucket.counts[ReportStatus.ACTIVE],
            completed=bucket.counts[ReportStatus.COMPLETED],
            rejected=bucket.counts[ReportStatus.REJECTED],
        )


class SweepResultResponse(BaseModel):
    sweep: str
    ran: bool
    selected: int = 0
    transitioned: int = 0
    skipped: int = 0
    failed: int = 0
