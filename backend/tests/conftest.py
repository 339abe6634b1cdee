"""
Shared test fixtures for Sunkool Orders tests

Provides database setup, client creation, catalog and acting-user fixtures
"""
import os

# Settings are read at import time; point them at SQLite before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from sunkool.main import app  # noqa: E402
from sunkool.db.base import Base  # noqa: E402
from sunkool.db.session import get_db  # noqa: E402

from tests.factories import (  # noqa: E402
    create_test_customer,
    create_test_inventory_item,
    reset_sequences,
)


# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine):
    """Create all tables for testing using SQLAlchemy metadata"""
    import sunkool.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_tables(engine):
    """Drop all tables after testing"""
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _reset_factory_sequences():
    reset_sequences()


@pytest.fixture
def db_session():
    """Create a fresh database session for each test"""
    create_tables(engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        drop_tables(engine)


@pytest.fixture
def db(db_session):
    """Alias used by the service-level tests"""
    return db_session


@pytest.fixture
def client(db_session):
    """Create a test client with database override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    """Acting user id forwarded by the identity layer"""
    return 1


@pytest.fixture
def user_headers(user_id):
    return {"X-User-Id": str(user_id)}


@pytest.fixture
def customer(db_session):
    customer = create_test_customer(db_session, name="Cool Breeze Traders")
    db_session.commit()
    return customer


@pytest.fixture
def inventory_item(db_session):
    item = create_test_inventory_item(db_session, item_name="Air Cooler 40L", sr_no=1)
    db_session.commit()
    return item


@pytest.fixture
def second_inventory_item(db_session):
    item = create_test_inventory_item(db_session, item_name="Cooling Pad Set", sr_no=2)
    db_session.commit()
    return item
