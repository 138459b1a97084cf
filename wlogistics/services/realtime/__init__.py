"""
Realtime Broadcaster Factory

Returns the process-wide tenant broadcaster. The websocket endpoint and the
order service must share one instance, so it is cached.

Usage:
    from wlogistics.services.realtime import get_broadcaster

    broadcaster = get_broadcaster()
    await broadcaster.publish("t_wis", ORDER_UPDATED, {"id": order.id})

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from wlogistics.core.config import get_settings
from wlogistics.services.realtime.base import (
    ORDER_CREATED,
    ORDER_DELETED,
    ORDER_UPDATED,
    BaseBroadcaster,
    BaseSubscriber,
    PublishResult,
    RealtimeEvent,
)
from wlogistics.services.realtime.broadcaster import TenantBroadcaster
from wlogistics.services.realtime.subscribers import QueueSubscriber, WebSocketSubscriber

logger = logging.getLogger(__name__)


@lru_cache()
def get_broadcaster() -> BaseBroadcaster:
    """Get the configured broadcaster instance."""
    settings = get_settings()
    logger.info(
        f"Realtime: Using TenantBroadcaster (history={settings.event_history_size}, "
        f"send timeout={settings.realtime_send_timeout}s)"
    )
    return TenantBroadcaster(
        history_size=settings.event_history_size,
        send_timeout=settings.realtime_send_timeout,
    )


def reset_broadcaster() -> None:
    """Clear the cached broadcaster instance."""
    get_broadcaster.cache_clear()


__all__ = [
    "get_broadcaster",
    "reset_broadcaster",
    "ORDER_CREATED",
    "ORDER_UPDATED",
    "ORDER_DELETED",
    "BaseBroadcaster",
    "BaseSubscriber",
    "PublishResult",
    "RealtimeEvent",
    "TenantBroadcaster",
    "QueueSubscriber",
    "WebSocketSubscriber",
]
