"""Response hardening, opaque session tokens, staff password rules and login throttling."""
import hashlib
import secrets
import time

from flask import request

# The API serves JSON and CSV only; nothing may be framed, scripted or cached.
API_SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none';",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
}

PASSWORD_MIN_LENGTH = 12
PASSWORD_SYMBOLS = "!@#$%^&*()-_=+[]{}|;:,.<>?/"

_PASSWORD_RULES = (
    (lambda pw: len(pw) >= PASSWORD_MIN_LENGTH, f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."),
    (lambda pw: pw.lower() != pw and pw.upper() != pw, "Use a mix of upper and lower case characters."),
    (lambda pw: any(c.isdigit() for c in pw), "Include at least one digit."),
    (lambda pw: any(c in PASSWORD_SYMBOLS for c in pw), "Include at least one symbol."),
)


def apply_security_headers(response, force_https: bool = False):
    for name, value in API_SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    if force_https or request.is_secure:
        response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
    return response


def generate_token(length: int = 32) -> str:
    return secrets.token_urlsafe(length)


def hash_value(value: str) -> str:
    """Digest stored in place of a session token."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def password_meets_policy(password: str) -> tuple[bool, str | None]:
    """Return ``(ok, reason)`` for the first staff password rule that fails."""
    for check, reason in _PASSWORD_RULES:
        if not check(password or ""):
            return False, reason
    return True, None


class AttemptTracker:
    """Per-key attempt counts inside a sliding window, held in process memory.

    Each gunicorn worker keeps its own counts.
    """

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._attempts: dict[str, list[float]] = {}

    def hit(self, key: str, limit: int, window: float) -> bool:
        now = self._clock()
        recent = [ts for ts in self._attempts.get(key, []) if now - ts < window]
        recent.append(now)
        self._attempts[key] = recent
        return len(recent) <= limit

    def reset(self, key: str) -> None:
        self._attempts.pop(key, None)

    def clear(self) -> None:
        self._attempts.clear()


login_attempts = AttemptTracker()


def track_attempt(key: str, limit: int = 10, window: float = 900) -> bool:
    """Record an attempt for ``key`` (e.g. ``login:<ip>``); False once over ``limit`` within ``window`` seconds."""
    return login_attempts.hit(key, limit, window)


def reset_attempts(key: str) -> None:
    login_attempts.reset(key)
