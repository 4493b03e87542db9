"""Authentication gateway between callers and the identity provider.

Every call returns a :class:`Result`; provider exceptions never escape. The
current session lives in an explicit :class:`SessionContext` owned by the
caller, and listeners registered through ``on_auth_state_change`` are told
about every transition so they can mirror the session elsewhere.
"""
from __future__ import annotations

from typing import Callable, List, Optional

from flask import current_app

from utils.errors import ServiceError, TransportError, Unauthenticated, ValidationError
from utils.identity_provider import AuthPayload, IdentityProvider, SessionHandle
from utils.results import Result

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

AuthListener = Callable[[str, Optional[SessionHandle]], None]


class SessionContext:
    """Holds the access token for one client."""

    def __init__(self, access_token: Optional[str] = None) -> None:
        self.access_token = access_token

    @property
    def is_empty(self) -> bool:
        return not self.access_token

    def update(self, handle: Optional[SessionHandle]) -> None:
        self.access_token = handle.access_token if handle else None


class Subscription:
    """Listener handle; ``unsubscribe`` may be called any number of times."""

    def __init__(self, release: Optional[Callable[[], None]] = None) -> None:
        self._release = release

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()


class IdentityGateway:
    def __init__(self, provider: IdentityProvider, context: Optional[SessionContext] = None) -> None:
        self.provider = provider
        self.context = context or SessionContext()
        self._listeners: List[AuthListener] = []

    def sign_in(self, email: str, password: str) -> Result:
        if not email or not password:
            return Result.failure(ValidationError("Email and password are required"))

        email = email.strip()
        try:
            handle = self.provider.sign_in_with_password(email, password)
        except ServiceError as exc:
            current_app.logger.warning("Sign in rejected", extra={"email": email, "reason": exc.message})
            return Result.failure(exc)
        except Exception:
            current_app.logger.exception("Sign in failed", extra={"email": email})
            return Result.failure(
                TransportError("Authentication service unavailable. Please check your connection and try again.")
            )

        self.context.update(handle)
        current_app.logger.info("Sign in successful", extra={"user_id": handle.user.id})
        self._emit(SIGNED_IN, handle)
        return Result.success(AuthPayload(user=handle.user, session=handle))

    def sign_up(self, email: str, password: str, profile: Optional[dict] = None) -> Result:
        if not email or not password:
            return Result.failure(ValidationError("Email and password are required"))

        email = email.strip()
        try:
            identity = self.provider.sign_up(email, password, profile or {})
        except ServiceError as exc:
            current_app.logger.warning("Sign up rejected", extra={"email": email, "reason": exc.message})
            return Result.failure(exc)
        except Exception:
            current_app.logger.exception("Sign up failed", extra={"email": email})
            return Result.failure(TransportError("Registration service unavailable. Please try again later."))
        return Result.success(AuthPayload(user=identity, session=None))

    def sign_out(self) -> Result:
        """Revoke the session upstream; local state is cleared even if that fails."""
        error = None
        try:
            self.provider.sign_out(self.context.access_token)
        except ServiceError as exc:
            current_app.logger.error("Sign out error", extra={"reason": exc.message})
            error = exc
        except Exception:
            current_app.logger.exception("Sign out failed")
            error = TransportError("Sign out failed")

        self.context.update(None)
        self._emit(SIGNED_OUT, None)
        return Result(error=error)

    def get_current_user(self) -> Result:
        if self.context.is_empty:
            return Result.failure(Unauthenticated("Auth session missing"))
        try:
            identity = self.provider.get_user(self.context.access_token)
        except ServiceError as exc:
            return Result.failure(exc)
        except Exception:
            current_app.logger.exception("Get user failed")
            return Result.failure(TransportError("Unable to verify authentication status"))
        if identity is None:
            return Result.failure(Unauthenticated("Invalid or expired session"))
        return Result.success(identity)

    def get_session(self) -> Result:
        if self.context.is_empty:
            return Result.success(None)
        try:
            return Result.success(self.provider.get_session(self.context.access_token))
        except ServiceError as exc:
            return Result.failure(exc)
        except Exception:
            current_app.logger.exception("Get session failed")
            return Result.failure(TransportError("Unable to retrieve session"))

    def refresh_session(self) -> Result:
        try:
            handle = self.provider.refresh_session(self.context.access_token)
        except ServiceError as exc:
            return Result.failure(exc)
        except Exception:
            current_app.logger.exception("Session refresh failed")
            return Result.failure(TransportError("Unable to refresh session"))

        self.context.update(handle)
        self._emit(TOKEN_REFRESHED, handle)
        return Result.success(handle)

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        if not callable(callback):
            current_app.logger.error(
                "Auth state listener must be callable", extra={"listener_type": type(callback).__name__}
            )
            return Subscription()
        self._listeners.append(callback)
        return Subscription(lambda: self._remove_listener(callback))

    def _remove_listener(self, callback: AuthListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self, event: str, handle: Optional[SessionHandle]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, handle)
            except Exception:
                current_app.logger.exception("Auth state listener raised", extra={"event": event})
