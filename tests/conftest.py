import os

os.environ["ENV"] = "test"

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.core.poller import AutoResponsePoller
from app.db import Base, build_engine, get_db
from app.main import create_app
from app.routers.utils.dependencies import (
    get_clock,
    get_message_sender,
    get_message_store,
    get_poller,
    get_send_rate_limiter,
)
from app.utils.rate_limit import SendRateLimiter

pytest_plugins = [
    "tests.fixtures.fakes",
    "tests.fixtures.wacli_fixtures",
    "tests.fixtures.auto_response_fixtures",
]

FIXED_NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def engine():
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """App database session on a fresh in-memory SQLite."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def poller(session_factory, message_store, fake_generator, fake_sender, clock):
    poller = AutoResponsePoller(
        session_factory=session_factory,
        message_store=message_store,
        generator=fake_generator,
        sender=fake_sender,
        interval_seconds=60,
        clock=clock,
    )
    yield poller
    poller.stop(timeout=5)


@pytest.fixture
def client(db, message_store, fake_sender, poller, clock):
    """Test client with the database and every external collaborator overridden."""
    app = create_app(testing=True)
    limiter = SendRateLimiter(30)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_message_store] = lambda: message_store
    app.dependency_overrides[get_message_sender] = lambda: fake_sender
    app.dependency_overrides[get_poller] = lambda: poller
    app.dependency_overrides[get_send_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
