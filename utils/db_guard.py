"""Translate SQLAlchemy failures into service-layer errors."""
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError

from extensions import db
from utils.errors import PersistenceError, TransportError


def _is_disconnect(exc: SQLAlchemyError) -> bool:
    # Only dropped connections are transport failures; "database is locked" is not.
    if isinstance(exc, InterfaceError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


@contextmanager
def translate_db_errors(action: str):
    """Roll back and re-raise database failures as TransportError/PersistenceError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        detail = str(getattr(exc, "orig", None) or exc)
        if _is_disconnect(exc):
            current_app.logger.error("Database unreachable", extra={"action": action, "error": detail})
            raise TransportError(f"Database unavailable while trying to {action}") from exc
        current_app.logger.error("Database rejected operation", extra={"action": action, "error": detail})
        raise PersistenceError(f"Failed to {action}: {detail}") from exc
