"""Shared pytest fixtures for the storage locator test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- client: AsyncClient with dependency overrides for DB-backed testing
- workspace_repo / location_repo / workspace_service / location_service
- owner_id / workspace_id: a workspace owned by a fresh user
"""

from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from src.db.session import Base, get_async_session
import src.db.tables  # noqa: F401, register ORM models on Base.metadata
from src.locations.service import LocationService
from src.locations.workspaces import WorkspaceService
from src.models.common import new_uuid7
from src.repositories.locations import LocationRepository
from src.repositories.workspace import WorkspaceRepository


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed — it rolls back at teardown.
    Application code calling session.commit() triggers a SAVEPOINT release,
    which is then restarted so subsequent operations stay in the same
    outer transaction.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
async def client(db_session):
    """AsyncClient with get_async_session overridden to use the test session."""
    from src.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Repositories / services over the test session
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace_repo(db_session) -> WorkspaceRepository:
    return WorkspaceRepository(db_session)


@pytest.fixture
def location_repo(db_session) -> LocationRepository:
    return LocationRepository(db_session)


@pytest.fixture
def workspace_service(workspace_repo) -> WorkspaceService:
    return WorkspaceService(workspace_repo)


@pytest.fixture
def location_service(location_repo, workspace_service) -> LocationService:
    return LocationService(location_repo, workspace_service)


@pytest.fixture
def owner_id() -> UUID:
    return new_uuid7()


@pytest.fixture
async def workspace_id(workspace_service, owner_id) -> UUID:
    ws = await workspace_service.create_workspace(actor_id=owner_id, name="Home")
    return ws.workspace_id
