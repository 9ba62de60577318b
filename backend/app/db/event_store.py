"""EventStore: gateway over the events relation.

No business rules live here. Every method runs in its own short session so a
read never holds a transaction open across the caller's awaits; the lifecycle
engine relies on conditional_update() to detect concurrent writers.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import InvalidEventError, StoreUnavailableError
from app.db.models.event import Event
from app.db.models.participant import Participant
from app.domain.lifecycle import EventStatus

logger = structlog.get_logger(__name__)


class EventStore:
    """Persistence gateway for Event rows.

    Uses dependency injection (takes session_factory) for testability.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating connectivity failures into StoreUnavailableError."""
        try:
            async with self.session_factory() as session:
                yield session
        except (OperationalError, InterfaceError, OSError) as exc:
            logger.warning("event_store_unavailable", error=str(exc), error_type=type(exc).__name__)
            raise StoreUnavailableError(f"Event store unavailable ({type(exc).__name__})") from exc

    async def get(self, event_id: uuid.UUID) -> Event | None:
        async with self._session() as session:
            return await session.get(Event, event_id)

    async def list_by_filter(
        self,
        *,
        status: EventStatus | None = None,
        start_from: datetime | None = None,
        start_before: datetime | None = None,
        end_before: datetime | None = None,
    ) -> list[Event]:
        """List events matching all given filters.

        Args:
            status: Exact status match
            start_from: start_time >= start_from
            start_before: start_time < start_before
            end_before: end_time < end_before

        Returns:
            Events ordered by start_time ascending.
        """
        stmt = select(Event)
        if status is not None:
            stmt = stmt.where(Event.status == status.value)
        if start_from is not None:
            stmt = stmt.where(Event.start_time >= start_from)
        if start_before is not None:
            stmt = stmt.where(Event.start_time < start_before)
        if end_before is not None:
            stmt = stmt.where(Event.end_time < end_before)
        stmt = stmt.order_by(Event.start_time)

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def list_reconstruction_candidates(self, window_start: datetime, window_end: datetime) -> list[Event]:
        """Events that could have held any status inside [window_start, window_end].

        Created on or before the window end, and neither rejected nor ended
        before the window start.
        """
        stmt = select(Event).where(
            Event.created_at <= window_end,
            or_(Event.rejected_at.is_(None), Event.rejected_at >= window_start),
            Event.end_time >= window_start,
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def conditional_update(
        self,
        event_id: uuid.UUID,
        expected_status: EventStatus,
        values: dict,
    ) -> Event | None:
        """Apply `values` only if the row still has `expected_status`.

        Returns:
            The updated Event, or None if the row is gone or its status changed
            since it was read (optimistic concurrency loss).
        """
        stmt = (
            update(Event)
            .where(Event.id == event_id, Event.status == expected_status.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            if result.rowcount != 1:
                await session.rollback()
                return None
            await session.commit()
            return await session.get(Event, event_id, populate_existing=True)

    async def insert(self, event: Event) -> Event:
        async with self._session() as session:
            session.add(event)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise InvalidEventError(f"Event violates a storage constraint: {exc.orig}") from exc
            await session.refresh(event)
            return event

    async def delete(self, event_id: uuid.UUID) -> bool:
        async with self._session() as session:
            await session.execute(delete(Participant).where(Participant.event_id == event_id))
            result = await session.execute(delete(Event).where(Event.id == event_id))
            await session.commit()
            return result.rowcount > 0

    async def list_participant_ids(self, event_id: uuid.UUID) -> list[str]:
        async with self._session() as session:
            result = await session.execute(
                select(Participant.user_id).where(Participant.event_id == event_id).order_by(Participant.joined_at)
            )
            return list(result.scalars().all())
