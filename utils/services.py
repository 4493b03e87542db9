"""Per-request wiring of the session context, identity gateway and store.

The access token travels in the signed cookie session; the gateway's change
notification keeps that cookie in step with sign-in, sign-out and refresh.
"""
from datetime import timedelta
from typing import Optional

from flask import current_app, g, session

from utils.identity_gateway import IdentityGateway, SessionContext
from utils.identity_provider import DatabaseIdentityProvider, SessionHandle
from utils.work_record_repository import SqlAlchemyWorkRecordRepository
from utils.work_record_store import WorkRecordStore

SESSION_TOKEN_KEY = "access_token"


def _mirror_session(event: str, handle: Optional[SessionHandle]) -> None:
    if handle is None:
        session.pop(SESSION_TOKEN_KEY, None)
        return
    session[SESSION_TOKEN_KEY] = handle.access_token
    session.permanent = True


def build_identity_provider() -> DatabaseIdentityProvider:
    ttl = int(current_app.config.get("AUTH_SESSION_TTL_MINUTES", 60))
    return DatabaseIdentityProvider(session_ttl=timedelta(minutes=ttl))


def get_gateway() -> IdentityGateway:
    if "identity_gateway" not in g:
        context = SessionContext(access_token=session.get(SESSION_TOKEN_KEY))
        gateway = IdentityGateway(build_identity_provider(), context)
        gateway.on_auth_state_change(_mirror_session)
        g.identity_gateway = gateway
    return g.identity_gateway


def get_store() -> WorkRecordStore:
    if "work_record_store" not in g:
        g.work_record_store = WorkRecordStore(get_gateway(), SqlAlchemyWorkRecordRepository())
    return g.work_record_store
