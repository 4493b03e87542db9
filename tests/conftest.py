"""
Pytest fixtures for the work tracker.

Every test gets a fresh application on in-memory SQLite. Service-level tests
run inside an explicit app context (``ctx``); HTTP tests use the test client
without one so each request builds its own gateway from the cookie session.
"""
import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app import create_app  # noqa: E402
from extensions import db  # noqa: E402
from models import User  # noqa: E402
from utils import security  # noqa: E402
from utils.identity_gateway import IdentityGateway, SessionContext  # noqa: E402
from utils.identity_provider import DatabaseIdentityProvider  # noqa: E402
from utils.work_record_repository import SqlAlchemyWorkRecordRepository  # noqa: E402
from utils.work_record_store import WorkRecordStore  # noqa: E402

STAFF_EMAIL = "officer@constituency.gov.in"
STAFF_PASSWORD = "Str0ng!Passw0rd"
ADMIN_EMAIL = "admin@constituency.gov.in"
ADMIN_PASSWORD = "Adm1n!Passw0rd#"

FIXED_TODAY = date(2024, 3, 15)


def make_record(**overrides) -> dict:
    """A valid create payload; override any field per test."""
    record = {
        "full_name": "Ramesh Kumar",
        "phone_number": "9876543210",
        "place_address": "Ward 4, Main Bazaar",
        "village_city": "Rampur",
        "constituency_origin": "Rampur North",
        "constituency_work": "Rampur Central",
        "nature_of_work": "development",
    }
    record.update(overrides)
    return record


def _create_user(email: str, password: str, role: str = "staff", is_active: bool = True) -> str:
    user = User(email=email, full_name=email.split("@")[0].title(), role=role, is_active=is_active)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user.id


@pytest.fixture(autouse=True)
def _clear_login_attempts():
    yield
    security.login_attempts.clear()


@pytest.fixture()
def app(tmp_path):
    application = create_app("testing", overrides={"LOG_DIR": str(tmp_path / "logs")})
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture()
def staff_user(app):
    with app.app_context():
        return _create_user(STAFF_EMAIL, STAFF_PASSWORD)


@pytest.fixture()
def admin_user(app):
    with app.app_context():
        return _create_user(ADMIN_EMAIL, ADMIN_PASSWORD, role="admin")


@pytest.fixture()
def gateway(ctx, staff_user):
    return IdentityGateway(DatabaseIdentityProvider(), SessionContext())


@pytest.fixture()
def signed_in_gateway(gateway):
    result = gateway.sign_in(STAFF_EMAIL, STAFF_PASSWORD)
    assert result.ok, result.error
    return gateway


@pytest.fixture()
def repository(ctx):
    return SqlAlchemyWorkRecordRepository()


@pytest.fixture()
def store(signed_in_gateway, repository):
    return WorkRecordStore(signed_in_gateway, repository, today=lambda: FIXED_TODAY)


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, email: str = STAFF_EMAIL, password: str = STAFF_PASSWORD):
    return client.post("/auth/login", json={"email": email, "password": password})


@pytest.fixture()
def auth_client(client, staff_user):
    response = login(client)
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture()
def admin_client(app, admin_user):
    client = app.test_client()
    response = login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert response.status_code == 200, response.get_json()
    return client
