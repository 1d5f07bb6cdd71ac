"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: explicit settings so tests never read a local .env
    - Database Fixtures: in-memory SQLite engine/session with demo data
    - Event Fixtures: fresh store, recording sink and service per test
    - Application Fixtures: FastAPI app, httpx AsyncClient and TestClient

Demo accounts (see ``docstore_service.features.seed.data``):
    company_a  admin / alice      company-a-admin-token / company-a-user-token
    company_b  admin / bob        company-b-admin-token / company-b-user-token
    company_c  admin (inactive)   company-c-admin-token
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator
import os
from typing import TYPE_CHECKING

from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
import pytest

# Keep the module-level app in docstore_service.app.main off the filesystem
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from docstore_service.core.settings import (  # noqa: E402
    AppSettings,
    DatabaseSettings,
    EventSettings,
    LoggingSettings,
    Settings,
    WebSocketSettings,
)
from docstore_service.features.events.service import EventService  # noqa: E402
from docstore_service.features.events.store import EventStore  # noqa: E402
from docstore_service.features.seed import DataSeedService  # noqa: E402
from docstore_service.infra.database import (  # noqa: E402
    close_database,
    create_engine,
    create_session_factory,
    init_database,
)

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from docstore_service.features.events.schemas import Event

MEMORY_DB_URL = "sqlite+aiosqlite:///:memory:"

ALICE_TOKEN = "company-a-user-token"
COMPANY_A_ADMIN_TOKEN = "company-a-admin-token"
BOB_TOKEN = "company-b-user-token"
COMPANY_C_ADMIN_TOKEN = "company-c-admin-token"


def tenant_headers(tenant_id: str, token: str | None = None) -> dict[str, str]:
    """Build the tenant/user headers for an HTTP request."""
    headers = {"X-Tenant-ID": tenant_id}
    if token is not None:
        headers["X-User-Token"] = token
    return headers


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def event_settings() -> EventSettings:
    return EventSettings(
        buffer_size=500,
        message_max_length=2048,
        replay_default_limit=100,
        replay_max_limit=500,
        snapshot_size=10,
    )


@pytest.fixture
def websocket_settings() -> WebSocketSettings:
    """WebSocket settings with the heartbeat disabled for deterministic tests."""
    return WebSocketSettings(
        heartbeat_interval=0,
        connection_timeout=0,
        auth_timeout=2.0,
        send_queue_size=100,
    )


@pytest.fixture
def settings(event_settings: EventSettings, websocket_settings: WebSocketSettings) -> Settings:
    return Settings(
        app=AppSettings(environment="test", seed_demo_data=True),
        db=DatabaseSettings(url=MEMORY_DB_URL),
        events=event_settings,
        logging=LoggingSettings(level="WARNING", file_enabled=False),
        websocket=websocket_settings,
    )


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with all tables created, disposed after the test."""
    engine = create_engine(DatabaseSettings(url=MEMORY_DB_URL))
    await init_database(engine)
    yield engine
    await close_database(engine)


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest.fixture
async def seeded_session_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> async_sessionmaker[AsyncSession]:
    """Session factory over a database holding the demo tenants and users."""
    await DataSeedService(session_factory).seed()
    return session_factory


@pytest.fixture
async def db_session(
    seeded_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with seeded_session_factory() as session:
        yield session


# ============================================================================
# Event Fixtures
# ============================================================================


class RecordingSink:
    """EventSink that remembers what it was handed."""

    def __init__(self, recipients: int = 0) -> None:
        self.events: list[Event] = []
        self.recipients = recipients

    def broadcast(self, event: Event) -> int:
        self.events.append(event)
        return self.recipients


@pytest.fixture
def event_store(event_settings: EventSettings) -> EventStore:
    return EventStore(buffer_size=event_settings.buffer_size)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def event_service(
    event_store: EventStore,
    sink: RecordingSink,
    event_settings: EventSettings,
) -> EventService:
    return EventService(event_store, sink, event_settings)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Fresh application per test; state is built by the lifespan."""
    from docstore_service.app.main import create_app

    return create_app(settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client with the application lifespan running.

    ``ASGITransport`` does not drive lifespan events, so the lifespan
    context is entered explicitly.
    """
    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac,
    ):
        yield ac


@pytest.fixture
def test_client(app: FastAPI) -> Generator[TestClient]:
    """Synchronous client for WebSocket flows; runs the lifespan on one loop."""
    with TestClient(app) as tc:
        yield tc
