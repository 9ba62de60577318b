class EventLifecycleError(Exception):
    """Base exception for the event lifecycle core."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__doc__ or ""
        super().__init__(self.message)


class EventNotFoundError(EventLifecycleError):
    """Event not found."""

    status_code = 404

    def __init__(self, event_id):
        self.event_id = event_id
        super().__init__(f"Event {event_id} not found")


class PermissionDeniedError(EventLifecycleError):
    """Raised when the actor may not act on the event."""

    status_code = 403

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InvalidTransitionError(EventLifecycleError):
    """Raised when the requested status change breaks the lifecycle rules."""

    status_code = 400

    def __init__(self, current, target, reason: str):
        self.current = current
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot move event from {current} to {target}: {reason}")


class TransitionConflictError(EventLifecycleError):
    """Event was modified concurrently; re-fetch and retry."""

    status_code = 409

    def __init__(self, event_id, expected_status):
        self.event_id = event_id
        self.expected_status = expected_status
        super().__init__(
            f"Event {event_id} changed while being updated (expected status {expected_status}); re-fetch and retry"
        )


class StoreUnavailableError(EventLifecycleError):
    """Event store is temporarily unavailable."""

    status_code = 503


class InvalidReportRangeError(EventLifecycleError):
    """Raised when a report interval is empty or too long."""

    status_code = 400


class InvalidEventError(EventLifecycleError):
    """Raised when event fields violate creation invariants."""

    status_code = 422
