"""Best-effort mapping from service errors to user-facing copy."""
from typing import Optional

from utils.errors import ServiceError, TransportError, Unauthenticated

CONNECTION_LOST = "Connection lost. Please check your internet connection and try again."
SESSION_EXPIRED = "Your session has expired. Please log in again."

_SUBSTRING_MESSAGES: dict[str, tuple[tuple[str, str], ...]] = {
    "login": (
        ("Load failed", CONNECTION_LOST),
        ("Invalid login credentials", "Invalid email or password. Please check your credentials and try again."),
        ("Email not confirmed", "Please check your email and click the confirmation link before signing in."),
        ("inactive", "Your account is inactive. Please contact the administrator."),
    ),
    "fetch": (
        ("Invalid record ID format", "Invalid record ID format. Please check the URL and try again."),
        ("No rows returned", "Work record not found. It may have been deleted or the ID is incorrect."),
    ),
    "save": (
        ("No rows returned", "Work record not found. It may have been deleted or the ID is incorrect."),
    ),
}

_FALLBACKS: dict[str, str] = {
    "login": "Login failed. Please try again.",
    "fetch": "Failed to load work record. Please try again.",
    "save": "Failed to save work record. Please try again.",
}

GENERIC_RETRY = "Something went wrong. Please try again."


def user_message(error: Optional[ServiceError], context: str = "") -> Optional[str]:
    if error is None:
        return None
    if isinstance(error, TransportError):
        return CONNECTION_LOST
    message = getattr(error, "message", None) or str(error)
    for needle, text in _SUBSTRING_MESSAGES.get(context, ()):
        if needle.lower() in message.lower():
            return text
    if isinstance(error, Unauthenticated) and context != "login":
        return SESSION_EXPIRED
    if context in ("login", "save") and message:
        # Inline form errors show the backend message when nothing matched.
        return message
    return _FALLBACKS.get(context, GENERIC_RETRY)
