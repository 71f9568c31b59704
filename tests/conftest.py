"""
Shared test fixtures.

The application reads DATABASE_URL when app.db.session is imported, so the
temporary database is configured here before any app module is imported.
The async store and a sync SQLAlchemy engine share the same SQLite file:
the sync engine seeds and inspects rows without touching the app's event loop.
"""

import os
import tempfile
from pathlib import Path

_DB_DIR = tempfile.mkdtemp(prefix="parked-domain-tracker-")
DB_PATH = Path(_DB_DIR) / "test.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["ACTIVE_SUBDOMAINS"] = '["mail.bozza.au", "admin.bozza.au"]'

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, delete, func, select  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from app.api.dependencies import get_origin_proxy  # noqa: E402
from app.db.models import Visitor  # noqa: E402
from app.main import app  # noqa: E402
from app.services.origin_proxy import OriginProxy  # noqa: E402

sync_engine = create_engine(f"sqlite:///{DB_PATH}")


@pytest.fixture(autouse=True)
def clean_database():
    """Ensure the visitors table exists and is empty for every test."""
    SQLModel.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        session.execute(delete(Visitor))
        session.commit()
    yield


@pytest.fixture
def db_session():
    with Session(sync_engine) as session:
        yield session


@pytest.fixture
def visitor_count():
    def count(domain=None) -> int:
        statement = select(func.count()).select_from(Visitor)
        if domain is not None:
            statement = statement.where(Visitor.domain == domain)
        with Session(sync_engine) as session:
            return session.execute(statement).scalar_one()
    return count


@pytest.fixture
def origin_requests():
    """Requests received by the fake origin."""
    return []


@pytest.fixture
def client(origin_requests):
    """TestClient with the origin replaced by an httpx.MockTransport."""

    def origin(request: httpx.Request) -> httpx.Response:
        origin_requests.append(request)
        return httpx.Response(
            203,
            content=b"origin says hi",
            headers={"content-type": "text/plain", "x-origin": "mail"},
        )

    proxy = OriginProxy(httpx.AsyncClient(transport=httpx.MockTransport(origin)))
    app.dependency_overrides[get_origin_proxy] = lambda: proxy

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_visitor(**overrides) -> Visitor:
    values = {
        "timestamp": "2026-01-01T00:00:00.000Z",
        "domain": "boz.dev",
        "path": "/",
        "method": "GET",
        "ip": "203.0.113.7",
        "user_agent": "Mozilla/5.0",
        "device_type": "Desktop",
        "is_mobile": 0,
        "is_bot": 0,
        "headers": "{}",
    }
    values.update(overrides)
    return Visitor(**values)


@pytest.fixture
def seed_visitors():
    """Insert visitor rows built from keyword overrides."""

    def seed(*rows: dict) -> None:
        with Session(sync_engine) as session:
            for overrides in rows:
                session.add(make_visitor(**overrides))
            session.commit()

    return seed
