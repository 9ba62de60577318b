"""TransitionExecutor: the single entry point for event status changes.

Combines permission rules, the lifecycle table and the store's conditional
update into one operation. User requests and background sweeps both go
through transition(); sweeps pass a SystemAuthority and skip the permission
rules but never the lifecycle rules.
"""

import uuid
from datetime import UTC, datetime

import structlog

from app.core.exceptions import (
    EventNotFoundError,
    InvalidTransitionError,
    PermissionDeniedError,
    TransitionConflictError,
)
from app.db.event_store import EventStore
from app.db.models.event import Event
from app.domain.lifecycle import (
    EventStatus,
    check_edge,
    lifecycle_timestamps,
    validate_transition,
)
from app.domain.permissions import Authority, UserAuthority, evaluate_permission
from app.services.notifier import LoggingNotifier, Notifier, TransitionEvent

logger = structlog.get_logger(__name__)


class TransitionExecutor:
    """Validates and applies event status transitions.

    Check order:
        1. Event exists (EventNotFoundError)
        2. The pair is an edge of the lifecycle graph (InvalidTransitionError)
        3. User actors pass the permission rules (PermissionDeniedError)
        4. Time guards of the edge hold at `now` (InvalidTransitionError)
        5. The row still has the status that was read (TransitionConflictError)
    """

    def __init__(self, store: EventStore, notifier: Notifier | None = None):
        self.store = store
        self.notifier = notifier or LoggingNotifier()

    async def transition(
        self,
        event_id: uuid.UUID,
        target: EventStatus,
        actor: Authority,
        now: datetime | None = None,
    ) -> Event:
        """Move an event to `target`.

        Args:
            event_id: Event to transition
            target: Requested status
            actor: UserAuthority for live requests, SystemAuthority for sweeps
            now: Current time (for deterministic testing)

        Returns:
            The updated Event

        Raises:
            EventNotFoundError, InvalidTransitionError, PermissionDeniedError,
            TransitionConflictError, StoreUnavailableError
        """
        now = now or datetime.now(UTC)
        log = logger.bind(event_id=str(event_id), target=target.value, cause=actor.cause)

        event = await self.store.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        current = EventStatus(event.status)

        edge = check_edge(current, target)
        if not edge.allowed:
            raise InvalidTransitionError(current.value, target.value, edge.reason)

        if isinstance(actor, UserAuthority):
            permission = evaluate_permission(actor, event.creator_id, current)
            if not permission.allowed:
                log.info("event_transition_denied", user_id=actor.user_id, reason=permission.reason)
                raise PermissionDeniedError(permission.reason)

        decision = validate_transition(current, target, event.start_time, now)
        if not decision.allowed:
            raise InvalidTransitionError(current.value, target.value, decision.reason)

        values = {"status": target.value, **lifecycle_timestamps(decision.rule, now)}
        updated = await self.store.conditional_update(event_id, current, values)
        if updated is None:
            log.info("event_transition_conflict", expected_status=current.value)
            raise TransitionConflictError(event_id, current.value)

        log.info("event_transitioned", from_status=current.value, to_status=target.value)

        await self._notify(event_id, current, target, actor.cause, now)
        return updated

    async def _notify(
        self,
        event_id: uuid.UUID,
        from_status: EventStatus,
        to_status: EventStatus,
        cause: str,
        now: datetime,
    ) -> None:
        """Emit the transition to the notifier. Failures are logged, never raised."""
        try:
            participant_ids = await self.store.list_participant_ids(event_id)
            await self.notifier.notify(
                TransitionEvent(
                    event_id=event_id,
                    from_status=from_status.value,
                    to_status=to_status.value,
                    cause=cause,
                    occurred_at=now,
                    participant_ids=tuple(participant_ids),
                )
            )
        except Exception as exc:
            logger.warning(
                "event_transition_notify_failed",
                event_id=str(event_id),
                error=str(exc),
                error_type=type(exc).__name__,
            )
