"""Event lifecycle API endpoints.

POST   /api/events              - Create an event (PENDING)
GET    /api/events/{event_id}   - Fetch one event
PATCH  /api/events/{event_id}/status - Request a status transition
DELETE /api/events/{event_id}   - Delete an event (creator or admin)
"""

import uuid

import structlog
from fastapi import APIRouter, Depends, Response

from app.api.dependencies import get_event_service, get_transition_executor
from app.core.auth import require_auth
from app.domain.permissions import UserAuthority
from app.schemas.events import CreateEventRequest, EventResponse, TransitionRequest
from app.services.event_service import EventService
from app.services.transition_service import TransitionExecutor

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("", status_code=201, response_model=EventResponse)
async def create_event(
    request: CreateEventRequest,
    actor: UserAuthority = Depends(require_auth),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    """Create a new event awaiting moderation."""
    event = await service.create_event(
        actor,
        title=request.title,
        start_time=request.start_time,
        end_time=request.end_time,
        max_participants=request.max_participants,
    )
    return EventResponse.from_event(event)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: uuid.UUID,
    _: UserAuthority = Depends(require_auth),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    event = await service.get_event(event_id)
    return EventResponse.from_event(event)


@router.patch("/{event_id}/status", response_model=EventResponse)
async def request_transition(
    event_id: uuid.UUID,
    request: TransitionRequest,
    actor: UserAuthority = Depends(require_auth),
    executor: TransitionExecutor = Depends(get_transition_executor),
) -> EventResponse:
    """Move an event to a new status.

    Errors:
        404: Event not found
        403: Actor may not change this event
        400: Transition not allowed by the lifecycle rules
        409: Event changed concurrently; re-fetch and retry
    """
    event = await executor.transition(event_id, request.status, actor)
    return EventResponse.from_event(event)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: uuid.UUID,
    actor: UserAuthority = Depends(require_auth),
    service: EventService = Depends(get_event_service),
) -> Response:
    await service.delete_event(actor, event_id)
    return Response(status_code=204)
