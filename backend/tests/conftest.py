"""Shared test fixtures for all test groups.

Store-backed tests run against a throwaway SQLite file (aiosqlite) so that
concurrent sessions get their own connections.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.db.base import create_engine_for_url, create_tables
from app.db.event_store import EventStore
from app.db.models.event import Event
from app.db.models.participant import Participant
from app.domain.lifecycle import EventStatus
from app.services.notifier import TransitionEvent
from app.services.transition_service import TransitionExecutor


class RecordingNotifier:
    """Notifier test double that keeps every transition it receives."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: list[TransitionEvent] = []

    async def notify(self, transition: TransitionEvent) -> None:
        if self.fail:
            raise ConnectionError("notifier down")
        self.events.append(transition)


@pytest.fixture
def now() -> datetime:
    """Fixed 'current time' for deterministic lifecycle checks."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def engine(tmp_path) -> AsyncEngine:
    """SQLite test engine with all tables created."""
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'events.db'}")
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory) -> EventStore:
    return EventStore(session_factory)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def executor(store: EventStore, notifier: RecordingNotifier) -> TransitionExecutor:
    return TransitionExecutor(store, notifier=notifier)


@pytest.fixture
def make_event(store: EventStore, now: datetime):
    """Factory inserting an Event; defaults to a PENDING event starting tomorrow."""

    async def _make(**overrides) -> Event:
        fields = {
            "id": uuid.uuid4(),
            "creator_id": "creator-1",
            "title": "Sunday five-a-side",
            "status": EventStatus.PENDING,
            "start_time": now + timedelta(days=1),
            "end_time": now + timedelta(days=1, hours=2),
            "max_participants": 10,
            "created_at": now - timedelta(days=2),
            "updated_at": now - timedelta(days=2),
        }
        fields.update(overrides)
        if isinstance(fields["status"], EventStatus):
            fields["status"] = fields["status"].value
        return await store.insert(Event(**fields))

    return _make


@pytest.fixture
def add_participant(session_factory):
    async def _add(event_id: uuid.UUID, user_id: str) -> None:
        async with session_factory() as session:
            session.add(Participant(event_id=event_id, user_id=user_id))
            await session.commit()

    return _add
