"""Actor authorities and the transition permission rules.

Pure domain logic. Scheduled sweeps act as SystemAuthority and never reach
evaluate_permission(); HTTP requests always arrive as UserAuthority.
"""
from dataclasses import dataclass
from enum import Enum

from app.domain.lifecycle import EventStatus


class Role(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    USER = "user"


@dataclass(frozen=True)
class UserAuthority:
    """A live user request."""

    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def cause(self) -> str:
        return "admin" if self.is_admin else "owner"


@dataclass(frozen=True)
class SystemAuthority:
    """Implicit authority of a background job."""

    job: str = "system"

    @property
    def cause(self) -> str:
        return self.job


Authority = UserAuthority | SystemAuthority


@dataclass
class PermissionDecision:
    allowed: bool
    reason: str = ""


def evaluate_permission(actor: UserAuthority, creator_id: str, current_status: EventStatus) -> PermissionDecision:
    """Decide whether `actor` may request a status change on an event.

    Rules, evaluated in order:
        1. Admins may request any transition (lifecycle rules still apply)
        2. Non-admins other than the creator are denied
        3. The creator cannot act while the event awaits moderation (PENDING)
        4. The creator cannot act on a REJECTED event
        5. Otherwise the creator is permitted
    """
    if actor.is_admin:
        return PermissionDecision(True)

    if actor.user_id != creator_id:
        return PermissionDecision(False, "Only the event creator or an admin can change this event")

    if current_status == EventStatus.PENDING:
        return PermissionDecision(False, "Event is awaiting moderation and cannot be changed by its creator")

    if current_status == EventStatus.REJECTED:
        return PermissionDecision(False, "Event was rejected and can no longer be changed")

    return PermissionDecision(True)


def can_delete(actor: UserAuthority, creator_id: str) -> PermissionDecision:
    """Only the creator or an admin may delete an event."""
    if actor.is_admin or actor.user_id == creator_id:
        return PermissionDecision(True)
    return PermissionDecision(False, "Only the event creator or an admin can delete this event")
