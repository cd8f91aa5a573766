"""
Error kinds raised by the scheduling core.

Every error carries the HTTP status the JSON layer answers with, so the
routes only need a single error handler.
"""


class SchedulingError(Exception):
    status_code = 400

    def __init__(self, message: str = None, **extra):
        self.message = message or (self.__class__.__doc__ or self.__class__.__name__).strip()
        self.extra = extra
        super().__init__(self.message)

    def payload(self) -> dict:
        data = {"error": self.message}
        data.update(self.extra)
        return data


class ValidationError(SchedulingError):
    """Invalid request data."""
    status_code = 400


class InvalidFormat(ValidationError):
    """Malformed time or date value."""


class NotFound(SchedulingError):
    """Record not found."""
    status_code = 404


class SlotUnavailable(SchedulingError):
    """Requested time slot is not available."""
    status_code = 409

    def __init__(self, message: str = None, suggestion=None):
        self.suggestion = suggestion
        super().__init__(
            message,
            suggested_slot=suggestion.to_dict() if suggestion is not None else None,
        )


class NoSlotAvailable(SchedulingError):
    """No available slot for that day."""
    status_code = 409


class InvalidStateTransition(SchedulingError):
    """Status change not allowed."""
    status_code = 409


class AlreadyServing(InvalidStateTransition):
    """Barber is already serving a customer."""


class QueueEmpty(InvalidStateTransition):
    """Nobody is waiting in the queue."""


class NotOngoing(InvalidStateTransition):
    """Only ongoing entries can be completed."""


class TokenGenerationFailed(SchedulingError):
    """Could not generate a unique queue token."""
    status_code = 503


class LimitReached(SchedulingError):
    """Entry limit reached; confirm replacement to continue."""
    status_code = 409

    def __init__(self, message: str = None):
        super().__init__(message, limit_reached=True)


class DuplicateBooking(SchedulingError):
    """An appointment already exists for this customer at that time."""
    status_code = 409


class DuplicateWorkingHours(SchedulingError):
    """Working hours already defined for this date."""
    status_code = 409
