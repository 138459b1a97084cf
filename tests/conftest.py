"""
Pytest configuration and fixtures for the order tracking tests.
"""

import os
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

# Set up test environment before the app reads its settings
os.environ["ENV_MODE"] = "development"
os.environ["SEED_DEMO_ORDERS"] = "false"

from wlogistics.core.config import Settings, get_settings  # noqa: E402

get_settings.cache_clear()

from wlogistics.main import app  # noqa: E402
from wlogistics.models import Order, OrderStatus, TimelineEntry  # noqa: E402
from wlogistics.services import get_order_service, reset_order_service  # noqa: E402
from wlogistics.services.drivers import DriverDirectory  # noqa: E402
from wlogistics.services.orders import OrderService  # noqa: E402
from wlogistics.services.realtime import QueueSubscriber, TenantBroadcaster  # noqa: E402
from wlogistics.store import InMemoryOrderStore  # noqa: E402


@pytest.fixture
def test_settings() -> Settings:
    """Settings with reference behavior and no demo data."""
    return Settings(seed_demo_orders=False, strict_order_validation=False, allow_assign_rewind=True)


@pytest.fixture
def store() -> InMemoryOrderStore:
    return InMemoryOrderStore(code_start=10001)


@pytest.fixture
def broadcaster() -> TenantBroadcaster:
    return TenantBroadcaster(history_size=50)


@pytest.fixture
def drivers() -> DriverDirectory:
    return DriverDirectory([("Nguyen Van An", "59A-123.45"), ("Tran Thi Binh", "51F-678.90")])


@pytest.fixture
def service(store, broadcaster, drivers, test_settings) -> OrderService:
    """Isolated order service; nothing shared with other tests."""
    return OrderService(store=store, broadcaster=broadcaster, drivers=drivers, settings=test_settings)


@pytest.fixture
def listener() -> QueueSubscriber:
    return QueueSubscriber(name="listener")


@pytest.fixture
def client(service):
    """FastAPI test client wired to the isolated service."""
    reset_order_service()
    app.dependency_overrides[get_order_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    reset_order_service()


@pytest.fixture
def make_order():
    """Factory for bare orders at a given status, bypassing the service."""

    def _make(status: OrderStatus = OrderStatus.CREATED, tenant_id: str = "t_wis") -> Order:
        now = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
        return Order(
            id=f"order-{status.name.lower()}",
            code="WL-99999",
            tenant_id=tenant_id,
            status=status,
            timeline=[TimelineEntry(status=status, at=now)],
            created_at=now,
            eta=now,
        )

    return _make
