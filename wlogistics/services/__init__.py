"""
                        Services Module

Business services behind the HTTP and websocket surface.

Services:
    - orders: order commands and queries over the store
    - realtime: tenant-room broadcaster and subscribers
    - drivers: roster of drivers handed out on assignment
"""

import logging
from functools import lru_cache

from wlogistics.core.config import get_settings
from wlogistics.services.drivers import DriverDirectory
from wlogistics.services.orders import OrderService
from wlogistics.services.realtime import get_broadcaster, reset_broadcaster
from wlogistics.store import InMemoryOrderStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_service() -> OrderService:
    """
    Get the process-wide order service.

    Builds one in-memory store and wires it to the shared broadcaster, so
    every request and websocket in this process sees the same orders.
    """
    settings = get_settings()
    logger.info("Order Service: Using InMemoryOrderStore (state is process-local)")
    return OrderService(
        store=InMemoryOrderStore(code_start=settings.order_code_start),
        broadcaster=get_broadcaster(),
        drivers=DriverDirectory(settings.driver_roster_list),
        settings=settings,
    )


def reset_order_service() -> None:
    """Drop the cached service, its store and the broadcaster."""
    get_order_service.cache_clear()
    reset_broadcaster()


__all__ = [
    "get_order_service",
    "reset_order_service",
    "OrderService",
    "DriverDirectory",
]
