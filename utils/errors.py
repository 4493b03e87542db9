"""Error taxonomy shared by the identity gateway and the work-record store.

Errors are returned as values inside a :class:`utils.results.Result` rather
than raised across the service boundary, so each one carries a stable
``code`` the HTTP layer and the message mapper can switch on.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for every error surfaced by the service layer."""

    code = "service_error"
    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(ServiceError):
    """A required field is missing or a value is malformed. Raised before any I/O."""

    code = "validation_error"
    http_status = 400


class Unauthenticated(ServiceError):
    code = "unauthenticated"
    http_status = 401


class NotFound(ServiceError):
    code = "not_found"
    http_status = 404


class TransportError(ServiceError):
    """The backing service could not be reached."""

    code = "transport_error"
    http_status = 503


class PersistenceError(ServiceError):
    """The backend rejected the operation."""

    code = "persistence_error"
    http_status = 500
