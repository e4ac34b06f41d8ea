"""Shared test fixtures: in-memory database and mocked vendor HTTP."""

from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from security_data.database import Base
from security_data.models import Security


class FakeVendor:
    """httpx transport that answers registered paths with canned JSON.

    Unregistered paths answer 404. Every request is recorded in ``requests``.
    """

    def __init__(self):
        self.routes: dict[str, tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, json: object, status_code: int = 200) -> None:
        self.routes[path] = (status_code, json)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body = self.routes.get(request.url.path, (404, {"error": "not found"}))
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_params(self) -> dict[str, str]:
        return dict(self.requests[-1].url.params)


@pytest.fixture
def vendor():
    """Fake vendor HTTP API."""
    return FakeVendor()


@pytest.fixture
def reporter():
    """Error reporter that records captured exceptions."""
    return MagicMock()


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Database session for each test."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_security(db):
    """A saved security without provider details."""
    security = Security(ticker="AAPL", exchange_operating_mic="XNAS", country_code="US")
    db.add(security)
    db.commit()
    db.refresh(security)
    return security
