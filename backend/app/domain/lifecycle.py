"""Event status enum and transition validation logic.

Pure domain logic with no external dependencies. The TRANSITIONS table is the
only place where the lifecycle graph is defined; permission checks and the
background sweeps go through validate_transition() rather than re-encoding it.
"""
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EventStatus(str, Enum):
    """Event lifecycle states."""

    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# (start_time, now) -> None if the edge may be taken, else the failure reason
TimeGuard = Callable[[datetime, datetime], str | None]


def _always(start_time: datetime, now: datetime) -> str | None:
    return None


def _started(start_time: datetime, now: datetime) -> str | None:
    if start_time > now:
        return "Event cannot be completed before it starts"
    return None


def _not_started(start_time: datetime, now: datetime) -> str | None:
    if start_time <= now:
        return "Event can only be reactivated while its start time is in the future"
    return None


@dataclass(frozen=True)
class TransitionRule:
    """One edge of the lifecycle graph."""

    source: EventStatus
    target: EventStatus
    guard: TimeGuard = _always
    sets_approved_at: bool = False
    sets_rejected_at: bool = False


_RULES = (
    TransitionRule(EventStatus.PENDING, EventStatus.ACTIVE, sets_approved_at=True),
    TransitionRule(EventStatus.PENDING, EventStatus.REJECTED, sets_rejected_at=True),
    TransitionRule(EventStatus.ACTIVE, EventStatus.CANCELLED),
    TransitionRule(EventStatus.ACTIVE, EventStatus.COMPLETED, guard=_started),
    TransitionRule(EventStatus.CANCELLED, EventStatus.ACTIVE, guard=_not_started),
)

# Valid state transitions, keyed by source status
TRANSITIONS: dict[EventStatus, dict[EventStatus, TransitionRule]] = {status: {} for status in EventStatus}
for _rule in _RULES:
    TRANSITIONS[_rule.source][_rule.target] = _rule

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


@dataclass
class TransitionDecision:
    """Result of a transition check."""

    allowed: bool
    reason: str = ""
    rule: TransitionRule | None = None


def is_terminal(status: EventStatus) -> bool:
    return status in TERMINAL_STATUSES


def allowed_targets(status: EventStatus) -> list[EventStatus]:
    """Statuses reachable from `status` in one step, ignoring time guards."""
    return list(TRANSITIONS[status])


def check_edge(current: EventStatus, target: EventStatus) -> TransitionDecision:
    """Check only that `current -> target` is an edge of the lifecycle graph.

    Rules:
        - Requesting the current status is rejected (no-op requests are errors)
        - Terminal statuses have no outgoing edges
        - Any pair missing from TRANSITIONS is rejected
    """
    if current == target:
        return TransitionDecision(False, f"Event is already {current.value}")

    if is_terminal(current):
        return TransitionDecision(False, f"Event is {current.value}, which is a terminal status")

    rule = TRANSITIONS[current].get(target)
    if rule is None:
        allowed = ", ".join(t.value for t in TRANSITIONS[current]) or "none"
        return TransitionDecision(
            False,
            f"Transition from {current.value} to {target.value} is not allowed (allowed: {allowed})",
        )

    return TransitionDecision(True, rule=rule)


def validate_transition(
    current: EventStatus,
    target: EventStatus,
    start_time: datetime,
    now: datetime,
) -> TransitionDecision:
    """Validate whether a status transition is allowed at `now`.

    Pure function -- no side effects, no DB access.

    Args:
        current: Current status of the event
        target: Requested status
        start_time: Event start time (tz-aware)
        now: Current time (tz-aware)

    Returns:
        TransitionDecision with allowed flag, reason, and the matched rule if allowed
    """
    decision = check_edge(current, target)
    if not decision.allowed:
        return decision

    reason = decision.rule.guard(start_time, now)
    if reason is not None:
        return TransitionDecision(False, reason)

    return decision


def lifecycle_timestamps(rule: TransitionRule, now: datetime) -> dict[str, datetime]:
    """Audit timestamps written alongside a transition.

    Driven by the edge taken, never by the target status alone:
    CANCELLED -> ACTIVE does not touch approved_at.
    """
    values: dict[str, datetime] = {}
    if rule.sets_approved_at:
        values["approved_at"] = now
    if rule.sets_rejected_at:
        values["rejected_at"] = now
    return values
