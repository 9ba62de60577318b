"""Periodic lifecycle sweeps.

Both sweeps select candidates, then hand each one to TransitionExecutor with
a SystemAuthority. Each event is isolated: a failure is logged and the sweep
moves on. A candidate that another writer already moved (a duplicate or
overlapping sweep, or a user action) surfaces as InvalidTransitionError or
TransitionConflictError and counts as skipped.
"""

import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import structlog

from app.core.exceptions import (
    EventNotFoundError,
    InvalidTransitionError,
    StoreUnavailableError,
    TransitionConflictError,
)
from app.db.event_store import EventStore
from app.domain.lifecycle import EventStatus
from app.domain.permissions import SystemAuthority
from app.services.transition_service import TransitionExecutor

logger = structlog.get_logger(__name__)

AUTO_REJECT_WINDOW = timedelta(minutes=30)


class SweepKind(str, Enum):
    COMPLETION = "completion"
    AUTO_REJECT = "auto_reject"


@dataclass
class SweepResult:
    sweep: SweepKind
    selected: int = 0
    transitioned: int = 0
    skipped: int = 0
    failed: int = 0


async def _apply(
    sweep: SweepKind,
    select: Callable[[], Awaitable[list]],
    executor: TransitionExecutor,
    target: EventStatus,
    now: datetime,
) -> SweepResult:
    result = SweepResult(sweep=sweep)
    log = logger.bind(sweep=sweep.value)
    authority = SystemAuthority(job=f"{sweep.value}_sweep")

    try:
        events = await select()
    except StoreUnavailableError as exc:
        log.warning("sweep_selection_failed", error=str(exc))
        return result

    result.selected = len(events)
    event_ids: list[uuid.UUID] = [event.id for event in events]

    for event_id in event_ids:
        try:
            await executor.transition(event_id, target, authority, now=now)
            result.transitioned += 1
        except (InvalidTransitionError, TransitionConflictError, EventNotFoundError) as exc:
            # Already handled elsewhere; expected when sweeps overlap
            result.skipped += 1
            log.info("sweep_event_skipped", event_id=str(event_id), reason=str(exc), error_type=type(exc).__name__)
        except StoreUnavailableError as exc:
            result.failed += 1
            log.warning("sweep_event_store_unavailable", event_id=str(event_id), error=str(exc))
        except Exception as exc:
            result.failed += 1
            log.error(
                "sweep_event_failed",
                event_id=str(event_id),
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )

    log.info(
        "sweep_finished",
        selected=result.selected,
        transitioned=result.transitioned,
        skipped=result.skipped,
        failed=result.failed,
    )
    return result


async def run_completion_sweep(
    executor: TransitionExecutor,
    store: EventStore,
    now: datetime | None = None,
) -> SweepResult:
    """Mark ACTIVE events whose end_time has passed as COMPLETED.

    Args:
        executor: Shared TransitionExecutor
        store: Event store used for candidate selection
        now: Injectable current time for testing

    Returns:
        SweepResult with per-outcome counts
    """
    now = now or datetime.now(UTC)
    return await _apply(
        SweepKind.COMPLETION,
        lambda: store.list_by_filter(status=EventStatus.ACTIVE, end_before=now),
        executor,
        EventStatus.COMPLETED,
        now,
    )


async def run_auto_reject_sweep(
    executor: TransitionExecutor,
    store: EventStore,
    now: datetime | None = None,
    window: timedelta = AUTO_REJECT_WINDOW,
) -> SweepResult:
    """Reject PENDING events starting within [now, now + window).

    An event that is about to start can no longer be moderated, so it is
    rejected instead of staying PENDING forever.
    """
    now = now or datetime.now(UTC)
    return await _apply(
        SweepKind.AUTO_REJECT,
        lambda: store.list_by_filter(status=EventStatus.PENDING, start_from=now, start_before=now + window),
        executor,
        EventStatus.REJECTED,
        now,
    )
