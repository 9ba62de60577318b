"""API-specific test fixtures."""

import time
from contextlib import asynccontextmanager

import jwt as pyjwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import get_settings


def make_token(user_id: str, role: str = "user", expires_in: int = 3600, **claims) -> str:
    """Sign an access token the way the external auth service does."""
    settings = get_settings()
    payload = {"sub": user_id, "role": role, "exp": int(time.time()) + expires_in, **claims}
    return pyjwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers():
    """Factory returning Authorization headers for a user id and role."""

    def _headers(user_id: str, role: str = "user") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}

    return _headers


@pytest.fixture
def api_client(tmp_path):
    """FastAPI test client backed by a throwaway SQLite database.

    Initializes the global database via init_db inside the TestClient's
    own event loop so route handlers can use get_session_factory(). The
    scheduler is constructed but not started; sweeps run only when triggered.
    """
    from app.api.dependencies import build_notifier
    from app.api.routes import api_router
    from app.db import close_db, init_db
    from app.db.base import get_session_factory
    from app.db.event_store import EventStore
    from app.jobs.scheduler import LifecycleScheduler
    from app.main import register_exception_handlers
    from app.middleware.correlation import setup_correlation_middleware
    from app.services.transition_service import TransitionExecutor

    db_url = f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        """Test lifespan - initialize DB in TestClient's event loop."""
        # Reset global so init_db creates a fresh engine in THIS loop
        import app.db.base as db_mod

        db_mod._engine = None
        db_mod._session_factory = None
        await init_db(db_url)

        store = EventStore(get_session_factory())
        app.state.scheduler = LifecycleScheduler(TransitionExecutor(store, notifier=build_notifier()), store)
        yield
        await close_db()

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Sports Events Backend - Test Client",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    setup_correlation_middleware(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    with TestClient(app) as client:
        yield client
