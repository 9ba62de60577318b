"""EventService: creation, lookup and deletion of events.

Status changes are not handled here; they go through TransitionExecutor.
"""

import uuid
from datetime import UTC, datetime

import structlog

from app.core.exceptions import EventNotFoundError, InvalidEventError, PermissionDeniedError
from app.db.event_store import EventStore
from app.db.models.event import Event
from app.domain.lifecycle import EventStatus
from app.domain.permissions import UserAuthority, can_delete

logger = structlog.get_logger(__name__)


def validate_event_fields(start_time: datetime, end_time: datetime, max_participants: int) -> None:
    """Raise InvalidEventError if the schedule or capacity is malformed."""
    if start_time.tzinfo is None or end_time.tzinfo is None:
        raise InvalidEventError("start_time and end_time must include a timezone")
    if end_time <= start_time:
        raise InvalidEventError("end_time must be after start_time")
    if max_participants <= 0:
        raise InvalidEventError("max_participants must be a positive integer")


class EventService:
    def __init__(self, store: EventStore):
        self.store = store

    async def create_event(
        self,
        actor: UserAuthority,
        title: str,
        start_time: datetime,
        end_time: datetime,
        max_participants: int,
        now: datetime | None = None,
    ) -> Event:
        """Create an event in PENDING, owned by `actor`."""
        validate_event_fields(start_time, end_time, max_participants)
        now = now or datetime.now(UTC)

        event = Event(
            id=uuid.uuid4(),
            creator_id=actor.user_id,
            title=title,
            status=EventStatus.PENDING.value,
            start_time=start_time,
            end_time=end_time,
            max_participants=max_participants,
            created_at=now,
            updated_at=now,
        )
        event = await self.store.insert(event)
        logger.info("event_created", event_id=str(event.id), creator_id=actor.user_id)
        return event

    async def get_event(self, event_id: uuid.UUID) -> Event:
        event = await self.store.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def delete_event(self, actor: UserAuthority, event_id: uuid.UUID) -> None:
        event = await self.get_event(event_id)

        decision = can_delete(actor, event.creator_id)
        if not decision.allowed:
            raise PermissionDeniedError(decision.reason)

        if not await self.store.delete(event_id):
            raise EventNotFoundError(event_id)
        logger.info("event_deleted", event_id=str(event_id), user_id=actor.user_id)
