"""ReportService: day-bucketed status counts reconstructed from lifecycle timestamps.

Read-only: fetches candidate events once per call and projects them onto
every day of the interval. Nothing is cached between calls.
"""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import structlog

from app.core.config import Settings, get_settings
from app.core.exceptions import InvalidReportRangeError
from app.db.event_store import EventStore
from app.db.models.event import Event
from app.domain.reconstruction import (
    DayStatusBucket,
    LifecycleSnapshot,
    build_day_buckets,
    day_window,
)

logger = structlog.get_logger(__name__)


def to_snapshot(event: Event) -> LifecycleSnapshot:
    return LifecycleSnapshot(
        event_id=str(event.id),
        created_at=event.created_at,
        end_time=event.end_time,
        approved_at=event.approved_at,
        rejected_at=event.rejected_at,
    )


class ReportService:
    def __init__(self, store: EventStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()
        self.tz = ZoneInfo(self.settings.report_timezone)

    def today(self, now: datetime | None = None) -> date:
        now = now or datetime.now(UTC)
        return now.astimezone(self.tz).date()

    async def reconstruct(self, start_date: date, end_date: date) -> list[DayStatusBucket]:
        """Reconstruct status counts for every day of [start_date, end_date].

        Raises:
            InvalidReportRangeError: start_date after end_date, or interval too long
        """
        if start_date > end_date:
            raise InvalidReportRangeError(f"start_date {start_date} is after end_date {end_date}")
        span = (end_date - start_date).days + 1
        if span > self.settings.report_max_days:
            raise InvalidReportRangeError(
                f"Report interval of {span} days exceeds the limit of {self.settings.report_max_days}"
            )

        window_start = day_window(start_date, self.tz).start
        window_end = day_window(end_date, self.tz).end
        events = await self.store.list_reconstruction_candidates(window_start, window_end)

        buckets = build_day_buckets((to_snapshot(e) for e in events), start_date, end_date, self.tz)
        logger.info(
            "status_report_reconstructed",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            candidates=len(events),
        )
        return buckets

    async def reconstruct_weekly(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        now: datetime | None = None,
    ) -> list[DayStatusBucket]:
        """Weekly report; missing bounds default to the last `weekly_report_days` ending today."""
        if end_date is None:
            end_date = self.today(now)
        if start_date is None:
            start_date = end_date - timedelta(days=self.settings.weekly_report_days - 1)
        return await self.reconstruct(start_date, end_date)
