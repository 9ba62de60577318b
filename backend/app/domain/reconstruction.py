"""Day-by-day status reconstruction from lifecycle timestamps.

Pure domain logic. There is no status history table: the status an event
had on a past day is inferred from created_at, approved_at, rejected_at and
end_time alone. The order of the checks in infer_status_on_day() is the rule;
several conditions can hold at once and the first one wins. Every rule is
evaluated as of the close of the day.
"""
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

import structlog

logger = structlog.get_logger(__name__)


class ReportStatus(str, Enum):
    """Labels a reconstructed day can carry, in report column order."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class LifecycleSnapshot:
    """The fields of an event the reconstruction reads."""

    event_id: str
    created_at: datetime | None
    end_time: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None


@dataclass
class DayStatusBucket:
    """Counts of inferred statuses for one calendar day. Never persisted."""

    date: date
    counts: dict[ReportStatus, int] = field(default_factory=lambda: {status: 0 for status in ReportStatus})

    def increment(self, status: ReportStatus) -> None:
        self.counts[status] += 1

    def as_dict(self) -> dict:
        return {"date": self.date.isoformat(), **{status.value: self.counts[status] for status in ReportStatus}}


@dataclass(frozen=True)
class DayWindow:
    """Inclusive [start, end] instants of a calendar day in the report zone."""

    day: date
    start: datetime
    end: datetime


def day_window(day: date, tz: ZoneInfo) -> DayWindow:
    start = datetime.combine(day, time.min, tzinfo=tz)
    next_start = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return DayWindow(day=day, start=start, end=next_start - timedelta(microseconds=1))


def days_in_interval(start_date: date, end_date: date) -> list[date]:
    """Every calendar day of the closed interval, ascending."""
    return [start_date + timedelta(days=offset) for offset in range((end_date - start_date).days + 1)]


def infer_status_on_day(event: LifecycleSnapshot, window: DayWindow) -> ReportStatus | None:
    """Infer which status `event` held on the day covered by `window`.

    Returns None when the event did not exist yet that day.

    Rules, first match wins:
        1. Created after the day ended -> None
        2. Rejected on or before the end of the day -> REJECTED
        3. Ended by the end of the day -> COMPLETED (completion is a time fact)
        4. Not approved by the end of the day -> PENDING
        5. Otherwise -> ACTIVE
    """
    if event.created_at > window.end:
        return None

    if event.rejected_at is not None and event.rejected_at <= window.end:
        return ReportStatus.REJECTED

    if event.end_time is not None and event.end_time <= window.end:
        return ReportStatus.COMPLETED

    if event.approved_at is None or event.approved_at > window.end:
        return ReportStatus.PENDING

    return ReportStatus.ACTIVE


def build_day_buckets(
    events: Iterable[LifecycleSnapshot],
    start_date: date,
    end_date: date,
    tz: ZoneInfo,
) -> list[DayStatusBucket]:
    """Reconstruct per-day status counts for the closed interval [start_date, end_date].

    Every day gets a bucket, pre-filled with zero for each ReportStatus.
    Events with a missing or naive created_at are skipped with a warning.
    """
    windows = [day_window(day, tz) for day in days_in_interval(start_date, end_date)]
    buckets = [DayStatusBucket(date=window.day) for window in windows]

    for event in events:
        if event.created_at is None:
            logger.warning("reconstruction_event_skipped", event_id=event.event_id, reason="missing_created_at")
            continue
        if event.created_at.tzinfo is None:
            logger.warning("reconstruction_event_skipped", event_id=event.event_id, reason="naive_created_at")
            continue

        for window, bucket in zip(windows, buckets):
            status = infer_status_on_day(event, window)
            if status is not None:
                bucket.increment(status)

    return buckets
