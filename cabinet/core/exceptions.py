"""Error taxonomy shared by the gateway clients, the coordinator and the API layer."""

from typing import Any, Optional


class PortalError(Exception):
    """Base class for errors the portal reports to the user."""

    status_code: int = 400
    error: str = "Bad Request"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ClientValidationError(PortalError):
    """Raised when input fails local validation, before any backend call."""

    status_code = 422
    error = "Validation Error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class BackendError(PortalError):
    """Raised when the practice backend answers with a non-2xx status.

    The backend's own message is kept verbatim so it can be shown to the user.
    """

    error = "Backend Error"

    def __init__(self, status_code: int, message: str, payload: Optional[Any] = None) -> None:
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class BackendUnavailableError(PortalError):
    """Raised when the backend cannot be reached at all."""

    status_code = 503
    error = "Service Unavailable"


class SlotUnavailableError(PortalError):
    """Raised when a doctor is not free at the requested date and time."""

    status_code = 409
    error = "Slot Unavailable"

    def __init__(self, message: str, retryable: bool = False) -> None:
        self.retryable = retryable
        super().__init__(message)


class InvalidTransitionError(PortalError):
    """Raised when an action is not allowed for the appointment's status."""

    status_code = 409
    error = "Invalid Transition"


class ConfirmationRequiredError(PortalError):
    """Raised when a destructive action is requested without confirmation."""

    status_code = 428
    error = "Confirmation Required"


class AppointmentNotFoundError(PortalError):
    status_code = 404
    error = "Not Found"
