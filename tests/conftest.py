"""Pytest configuration and fixtures."""

import os

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    _base, _name = os.environ["DATABASE_URL"].rsplit("/", 1)
    SQLALCHEMY_DATABASE_URL = f"{_base}/{_name}_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

# The app reads DATABASE_URL when it starts; point it at the test database too
os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from quotekeeper.api.dependencies import get_storage_backend  # noqa: E402
from quotekeeper.config import Settings  # noqa: E402
from quotekeeper.database import Base, build_engine, get_db  # noqa: E402
from quotekeeper.main import app  # noqa: E402
from quotekeeper.services.cookies import MemoryCookieJar  # noqa: E402
from quotekeeper.services.sessions import SessionManager  # noqa: E402
from quotekeeper.services.store_selector import StorageBackend, StoreSelector  # noqa: E402
from quotekeeper.stores.memory import MemoryStore  # noqa: E402
from quotekeeper.stores.sql import SqlStore  # noqa: E402

engine = build_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "correct horse"


class FakeProbe:
    """Durable store probe whose answer the test controls.

    Set ``reachable`` to False to simulate an outage, or to an exception to make the
    probe itself fail.
    """

    def __init__(self):
        self.reachable: bool | Exception = True
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        if isinstance(self.reachable, Exception):
            raise self.reachable
        return self.reachable


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def backend(probe):
    """Storage backend that re-probes on every call, so tests can flip the outage."""
    return StorageBackend(StoreSelector(probe, freshness_seconds=0), MemoryStore())


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def sql_store(db):
    return SqlStore(db)


@pytest.fixture
def cookie_jar():
    return MemoryCookieJar()


@pytest.fixture
def session_manager(backend, sql_store, cookie_jar, settings):
    return SessionManager(backend, sql_store, cookie_jar, settings)


@pytest.fixture
def stored_user(sql_store):
    """A user in the durable store, created without going through sign-up."""
    return sql_store.create_user("Ada Lovelace", "ada@example.com", "not-a-real-hash")


@pytest.fixture(scope="function")
def client(db, backend):
    """Create a test client with database and storage backend overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_backend] = lambda: backend
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def ada(client):
    """Sign up Ada; the client keeps her session cookie. Returns the created user."""
    response = client.post(
        "/api/v1/auth/sign-up",
        json={
            "name": "Ada",
            "email": "ada@example.com",
            "password": TEST_PASSWORD,
            "confirm_password": TEST_PASSWORD,
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    return data["user"]
