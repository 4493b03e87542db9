"""Identity provider boundary and the bundled database-backed provider.

The gateway only talks to :class:`IdentityProvider`; any hosted identity
service can be plugged in by implementing the same six calls. Providers raise
:class:`utils.errors.ServiceError` subclasses for expected failures (bad
credentials, duplicate accounts) and let anything else propagate for the
gateway to convert.
"""
from __future__ import annotations

import abc
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from flask_login import UserMixin

from extensions import db
from models import USER_ROLES, SessionToken, User
from utils.db_guard import translate_db_errors
from utils.errors import Unauthenticated, ValidationError
from utils.security import generate_token, hash_value, password_meets_policy


@dataclass(frozen=True, eq=False)
class AuthIdentity(UserMixin):
    """The authenticated actor as seen by the rest of the application."""

    id: str
    email: str
    full_name: Optional[str] = None
    role: str = "staff"
    metadata: dict = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class SessionHandle:
    access_token: str
    expires_at: datetime
    user: AuthIdentity

    @property
    def expires_in(self) -> int:
        return max(0, int((self.expires_at - datetime.utcnow()).total_seconds()))

    def to_dict(self) -> dict:
        # The token itself stays server-side in the cookie session.
        return {
            "expires_at": self.expires_at.isoformat(),
            "expires_in": self.expires_in,
            "user": self.user.to_dict(),
        }


@dataclass(frozen=True)
class AuthPayload:
    user: AuthIdentity
    session: Optional[SessionHandle] = None

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "session": self.session.to_dict() if self.session else None,
        }


class IdentityProvider(abc.ABC):
    @abc.abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> SessionHandle:
        ...

    @abc.abstractmethod
    def sign_up(self, email: str, password: str, metadata: Optional[dict] = None) -> AuthIdentity:
        ...

    @abc.abstractmethod
    def sign_out(self, access_token: Optional[str]) -> None:
        ...

    @abc.abstractmethod
    def get_user(self, access_token: Optional[str]) -> Optional[AuthIdentity]:
        ...

    @abc.abstractmethod
    def get_session(self, access_token: Optional[str]) -> Optional[SessionHandle]:
        ...

    @abc.abstractmethod
    def refresh_session(self, access_token: Optional[str]) -> SessionHandle:
        ...


class DatabaseIdentityProvider(IdentityProvider):
    """Email/password identities stored in the ``users`` table.

    Session tokens are opaque random strings; only their sha256 digest is
    persisted in ``auth_sessions``.
    """

    def __init__(self, session_ttl: timedelta = timedelta(minutes=60)) -> None:
        self.session_ttl = session_ttl

    def sign_in_with_password(self, email: str, password: str) -> SessionHandle:
        with translate_db_errors("sign in"):
            user = User.query.filter_by(email=email.lower()).first()
            if not user or not user.check_password(password):
                raise Unauthenticated("Invalid login credentials")
            if not user.is_active:
                raise Unauthenticated("User account is inactive")

            handle = self._issue_session(user)
            user.last_login_at = datetime.utcnow()
            db.session.commit()
            return handle

    def sign_up(self, email: str, password: str, metadata: Optional[dict] = None) -> AuthIdentity:
        metadata = dict(metadata or {})
        password_ok, reason = password_meets_policy(password)
        if not password_ok:
            raise ValidationError(reason, details={"password": reason})
        role = (metadata.get("role") or "staff").strip().lower()
        if role not in USER_ROLES:
            raise ValidationError("Invalid role", details={"role": f"Must be one of: {', '.join(USER_ROLES)}"})

        with translate_db_errors("sign up"):
            if User.query.filter_by(email=email.lower()).first():
                raise ValidationError("User already registered", details={"email": "Already registered"})
            user = User(email=email.lower(), full_name=(metadata.get("name") or "").strip() or None, role=role)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return self._identity(user)

    def sign_out(self, access_token: Optional[str]) -> None:
        if not access_token:
            return
        with translate_db_errors("sign out"):
            row = SessionToken.query.filter_by(token_hash=hash_value(access_token)).first()
            if row and not row.is_revoked:
                row.revoked_at = datetime.utcnow()
                db.session.commit()

    def get_user(self, access_token: Optional[str]) -> Optional[AuthIdentity]:
        with translate_db_errors("load user"):
            row = self._valid_session(access_token)
            return self._identity(row.user) if row else None

    def get_session(self, access_token: Optional[str]) -> Optional[SessionHandle]:
        with translate_db_errors("load session"):
            row = self._valid_session(access_token)
            if not row:
                return None
            return SessionHandle(access_token=access_token, expires_at=row.expires_at, user=self._identity(row.user))

    def refresh_session(self, access_token: Optional[str]) -> SessionHandle:
        with translate_db_errors("refresh session"):
            row = self._valid_session(access_token)
            if not row:
                raise Unauthenticated("Invalid or expired session")
            row.revoked_at = datetime.utcnow()
            handle = self._issue_session(row.user)
            db.session.commit()
            return handle

    def _issue_session(self, user: User) -> SessionHandle:
        token = generate_token(32)
        row = SessionToken(
            user=user,
            token_hash=hash_value(token),
            expires_at=datetime.utcnow() + self.session_ttl,
        )
        db.session.add(row)
        return SessionHandle(access_token=token, expires_at=row.expires_at, user=self._identity(user))

    @staticmethod
    def _valid_session(access_token: Optional[str]) -> Optional[SessionToken]:
        if not access_token:
            return None
        row = SessionToken.query.filter_by(token_hash=hash_value(access_token)).first()
        if not row or not row.is_valid or not row.user or not row.user.is_active:
            return None
        return row

    @staticmethod
    def _identity(user: User) -> AuthIdentity:
        return AuthIdentity(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            metadata={"name": user.full_name, "role": user.role},
        )
