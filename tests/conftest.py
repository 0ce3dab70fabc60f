"""Shared fixtures for the automation test suite."""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient

from agri_shield.core.config import Settings, clear_settings_cache
from agri_shield.core.events import ClaimEvent, ClaimEventBus
from agri_shield.models import (
    FarmLocation,
    PolicyProduct,
    RequestContext,
    UserPolicy,
    UserRole,
)
from agri_shield.storage import InMemoryAutomationStore
from tests.fixtures.test_data import FIXED_NOW, make_farm, make_policy, make_product


@pytest.fixture
def settings() -> Settings:
    """Settings pinned to the in-memory backend."""
    return Settings(
        storage_backend="memory",
        weather_api_key="test-weather-key",
        evaluation_timeout_seconds=5,
        ingestion_timeout_seconds=5,
    )


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(now: datetime) -> Callable[[], datetime]:
    return lambda: now


@pytest.fixture
def store() -> InMemoryAutomationStore:
    return InMemoryAutomationStore()


@pytest.fixture
def event_bus() -> ClaimEventBus:
    return ClaimEventBus()


@pytest.fixture
def published_events(event_bus: ClaimEventBus) -> list[ClaimEvent]:
    """Events published on ``event_bus`` during the test."""
    events: list[ClaimEvent] = []

    async def collect(event: ClaimEvent) -> None:
        events.append(event)

    event_bus.subscribe(collect)
    return events


@pytest.fixture
def reviewer() -> RequestContext:
    return RequestContext(user_id="insurer-1", role=UserRole.INSURER)


@pytest.fixture
def admin() -> RequestContext:
    return RequestContext(user_id="admin-1", role=UserRole.ADMIN)


@pytest.fixture
def farmer() -> RequestContext:
    return RequestContext(user_id="farmer-1", role=UserRole.FARMER)


@pytest.fixture
def farm(store: InMemoryAutomationStore) -> FarmLocation:
    return store.add_farm(make_farm())


@pytest.fixture
async def product(store: InMemoryAutomationStore) -> PolicyProduct:
    return await store.create_product(make_product())


@pytest.fixture
def policy(
    store: InMemoryAutomationStore, product: PolicyProduct, farm: FarmLocation
) -> UserPolicy:
    return store.add_policy(make_policy(product, farm.farm_id))


@pytest.fixture
async def api_client(
    store: InMemoryAutomationStore,
    monkeypatch: pytest.MonkeyPatch,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app backed by ``store``."""
    from agri_shield import storage
    from agri_shield.main import create_app

    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    clear_settings_cache()
    storage.set_store(store)
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    storage.set_store(None)
    clear_settings_cache()
