"""Shared test setup: an SQLite database, fake carrier/storage and an app client."""

import os
import tempfile
from pathlib import Path

_TEST_DB = Path(tempfile.mkdtemp(prefix="gateway-tests-")) / "gateway_test.db"

os.environ["ENV"] = "test"
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_TEST_DB}"
os.environ["CARRIER_ENABLED"] = "false"
os.environ.pop("S3_BUCKET", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402

import app.models  # noqa: E402,F401
from app.db import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import create_app  # noqa: E402

pytest_plugins = [
    "tests.fixtures.fakes",
    "tests.fixtures.user_fixtures",
    "tests.fixtures.contact_fixtures",
    "tests.fixtures.message_fixtures",
]


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db():
    """A session per test. Every table is emptied afterwards."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(delete(table))


def _build_client(db, app_state, headers=None):
    app = create_app(testing=True, state=app_state)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return app, TestClient(app, headers=headers or {})


@pytest.fixture
def client(db, app_state, setup_user):
    """Client authenticated as setup_user."""
    app, test_client = _build_client(
        db, app_state, headers={"X-User-Id": str(setup_user.id)}
    )
    with test_client as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(db, app_state):
    """Client without an X-User-Id header (webhooks, provisioning)."""
    app, test_client = _build_client(db, app_state)
    with test_client as c:
        yield c
    app.dependency_overrides.clear()
