"""Re-export all models so Base.metadata sees them."""

from app.db.models.event import Event
from app.db.models.participant import Participant

__all__ = [
    "Event",
    "Participant",
]
