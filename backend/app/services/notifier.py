"""Transition notifications: best-effort fan-out of status changes.

Delivery (push, socket, email) is owned by downstream consumers. This module
only publishes the fact that a transition happened.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

import structlog
from redis.asyncio import Redis

logger = structlog.get_logger(__name__)

EVENT_STATUS_CHANGED = "event.status_changed"


@dataclass(frozen=True)
class TransitionEvent:
    """Outcome of a successful transition."""

    event_id: uuid.UUID
    from_status: str
    to_status: str
    cause: str
    occurred_at: datetime
    participant_ids: tuple[str, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict:
        return {
            "type": EVENT_STATUS_CHANGED,
            "event_id": str(self.event_id),
            "from_status": self.from_status,
            "to_status": self.to_status,
            "cause": self.cause,
            "participant_ids": list(self.participant_ids),
            "timestamp": self.occurred_at.isoformat(),
        }


class Notifier(Protocol):
    async def notify(self, transition: TransitionEvent) -> None: ...


class LoggingNotifier:
    """Fallback notifier used when no Redis is configured."""

    async def notify(self, transition: TransitionEvent) -> None:
        logger.info("event_transition_notified", **transition.to_payload())


class RedisNotifier:
    """Publishes transitions to the event:{id}:status Pub/Sub channel."""

    def __init__(self, redis: Redis):
        self.redis = redis

    @staticmethod
    def channel(event_id: uuid.UUID) -> str:
        return f"event:{event_id}:status"

    async def notify(self, transition: TransitionEvent) -> None:
        await self.redis.publish(
            self.channel(transition.event_id),
            json.dumps(transition.to_payload()),
        )
