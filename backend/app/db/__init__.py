"""Database package: engine lifecycle, event store gateway and optional Redis pool."""

from app.db.base import Base, close_db, create_engine_for_url, get_session_factory, init_db
from app.db.event_store import EventStore
from app.db.redis import close_redis, get_redis, get_redis_or_none, init_redis

__all__ = [
    "Base",
    "EventStore",
    "close_db",
    "close_redis",
    "create_engine_for_url",
    "get_redis",
    "get_redis_or_none",
    "get_session_factory",
    "init_db",
    "init_redis",
]
