"""Shared fixtures for catalog tests.

Every test gets its own in-memory SQLite database (aiosqlite) with the
catalog tables created from the ORM metadata, and a fake inventory
client whose answers are set per test.
"""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.catalog.enrichment import InventoryEnrichment, get_inventory_enrichment
from app.infrastructure.database import Base, get_session
from app.infrastructure.inventory_client import InventoryClientError, InventoryItem
from app.main import app


# ============================================================================
# Inventory Fakes
# ============================================================================


class FakeInventoryClient:
    """In-memory stand-in for the inventory service client.

    Attributes:
        quantities: Available quantity per known inventory ID.
        failing: Inventory IDs whose lookup raises InventoryClientError.
        batch_fails: Whether the batch endpoint raises.
        calls: Inventory IDs passed to ``get_by_id``, in call order.
        batch_calls: ID lists passed to ``get_batch``.
    """

    def __init__(self) -> None:
        self.quantities: dict[str, int] = {}
        self.failing: set[str] = set()
        self.batch_fails = False
        self.calls: list[str] = []
        self.batch_calls: list[list[str]] = []

    def _item(self, inventory_id: str) -> InventoryItem:
        quantity = self.quantities[inventory_id]
        return InventoryItem(
            inventory_id=inventory_id,
            sku=None,
            available_quantity=quantity,
            reserved_quantity=0,
            total_quantity=quantity,
            in_stock=quantity > 0,
        )

    async def get_by_id(self, inventory_id: str) -> InventoryItem | None:
        self.calls.append(inventory_id)
        if inventory_id in self.failing:
            raise InventoryClientError("Failed to get inventory: boom", 500)
        if inventory_id not in self.quantities:
            return None
        return self._item(inventory_id)

    async def get_batch(self, inventory_ids: list[str]) -> list[InventoryItem]:
        self.batch_calls.append(list(inventory_ids))
        if self.batch_fails:
            raise InventoryClientError("Failed to get inventory batch: boom", 502)
        return [self._item(i) for i in inventory_ids if i in self.quantities]


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory database with the catalog schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session on the test database."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Inventory Fixtures
# ============================================================================


@pytest.fixture
def inventory_client() -> FakeInventoryClient:
    """Fake inventory client with no known items."""
    return FakeInventoryClient()


@pytest.fixture
def enrichment(inventory_client: FakeInventoryClient) -> InventoryEnrichment:
    """Enrichment over the fake inventory client."""
    return InventoryEnrichment(inventory_client, timeout=1.0)  # type: ignore[arg-type]


# ============================================================================
# HTTP Client Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    enrichment: InventoryEnrichment,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for the app, wired to the test database and fake inventory."""

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_inventory_enrichment] = lambda: enrichment

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
