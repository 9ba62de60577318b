"""FastAPI dependencies wiring the lifecycle services to the shared DB/Redis pools."""

from fastapi import HTTPException, Request

from app.db.base import get_session_factory
from app.db.event_store import EventStore
from app.db.redis import get_redis_or_none
from app.jobs.scheduler import LifecycleScheduler
from app.services.event_service import EventService
from app.services.notifier import LoggingNotifier, Notifier, RedisNotifier
from app.services.report_service import ReportService
from app.services.transition_service import TransitionExecutor


def build_notifier() -> Notifier:
    """RedisNotifier when Redis is initialized, LoggingNotifier otherwise."""
    redis = get_redis_or_none()
    if redis is None:
        return LoggingNotifier()
    return RedisNotifier(redis)


def get_event_store() -> EventStore:
    return EventStore(get_session_factory())


def get_transition_executor() -> TransitionExecutor:
    return TransitionExecutor(get_event_store(), notifier=build_notifier())


def get_event_service() -> EventService:
    return EventService(get_event_store())


def get_report_service() -> ReportService:
    return ReportService(get_event_store())


def get_scheduler(request: Request) -> LifecycleScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Scheduler not available")
    return scheduler
