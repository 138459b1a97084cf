"""
Tenant Broadcaster

An explicit subscriber registry keyed by tenant id. Publishing sends to
every member of the room concurrently, each send bounded by a timeout; a
subscriber whose send fails or times out is removed from every room, so a
stalled client never holds up the command that published.

Joining an unknown tenant is silently ignored so that clients cannot probe
which tenant ids exist.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from collections import deque
from typing import Any, Iterable, Optional

from wlogistics.models import KNOWN_TENANT_IDS
from wlogistics.services.realtime.base import (
    BaseBroadcaster,
    BaseSubscriber,
    PublishResult,
    RealtimeEvent,
)

logger = logging.getLogger(__name__)


class TenantBroadcaster(BaseBroadcaster):
    """
    In-process broadcaster with per-tenant rooms.

    Attributes:
        known_tenants: Tenant ids that may be joined
        history_size: Number of published events kept for inspection
        send_timeout: Seconds a single subscriber may take to accept a frame

    Example:
        >>> broadcaster = TenantBroadcaster()
        >>> broadcaster.subscribe(listener, "t_wis")
        True
        >>> await broadcaster.publish("t_wis", "order.updated", {"id": "abc"})
        PublishResult(room='t_wis', event='order.updated', delivered=1, dropped=0)
    """

    def __init__(
        self,
        known_tenants: Iterable[str] = KNOWN_TENANT_IDS,
        history_size: int = 200,
        send_timeout: float = 2.0,
    ):
        self.known_tenants = frozenset(known_tenants)
        self.send_timeout = send_timeout
        self._rooms: dict[str, set[BaseSubscriber]] = {}
        self._history: deque[RealtimeEvent] = deque(maxlen=history_size)

    @property
    def provider_name(self) -> str:
        return "memory"

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def subscribe(self, subscriber: BaseSubscriber, tenant_id: Optional[str]) -> bool:
        if not tenant_id or tenant_id not in self.known_tenants:
            logger.debug(f"Ignored join of {subscriber.subscriber_id} to unknown room {tenant_id!r}")
            return False

        self._rooms.setdefault(tenant_id, set()).add(subscriber)
        logger.info(f"{subscriber.subscriber_id} joined room {tenant_id}")
        return True

    def unsubscribe(self, subscriber: BaseSubscriber, tenant_id: Optional[str] = None) -> None:
        rooms = [tenant_id] if tenant_id else list(self._rooms)
        for room in rooms:
            members = self._rooms.get(room)
            if members is None or subscriber not in members:
                continue
            members.discard(subscriber)
            if not members:
                del self._rooms[room]
            logger.info(f"{subscriber.subscriber_id} left room {room}")

    def rooms_of(self, subscriber: BaseSubscriber) -> set[str]:
        return {room for room, members in self._rooms.items() if subscriber in members}

    def room_size(self, tenant_id: str) -> int:
        return len(self._rooms.get(tenant_id, ()))

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    async def publish(
        self,
        tenant_id: Optional[str],
        event: str,
        payload: dict[str, Any],
    ) -> PublishResult:
        result = PublishResult(room=tenant_id, event=event)

        if not tenant_id:
            logger.debug(f"{event} {payload} has no tenant room; nobody notified")
            return result

        members = list(self._rooms.get(tenant_id, ()))
        outcomes = await asyncio.gather(*(self._deliver(s, event, payload) for s in members))
        failed = [s for s, ok in zip(members, outcomes) if not ok]
        result.delivered = len(members) - len(failed)

        for subscriber in failed:
            self.unsubscribe(subscriber)
        result.dropped = len(failed)

        self._history.append(
            RealtimeEvent(room=tenant_id, event=event, payload=dict(payload), delivered=result.delivered)
        )
        logger.debug(f"Published {event} to {tenant_id}: {result.delivered} delivered, {result.dropped} dropped")
        return result

    async def _deliver(self, subscriber: BaseSubscriber, event: str, payload: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(subscriber.send(event, payload), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Dropping {subscriber.subscriber_id}: no send within {self.send_timeout}s")
        except Exception as e:
            logger.warning(f"Dropping {subscriber.subscriber_id} after failed send: {e}")
        return False

    def events(self, room: Optional[str] = None) -> list[RealtimeEvent]:
        if room is None:
            return list(self._history)
        return [e for e in self._history if e.room == room]

    def clear_history(self) -> None:
        self._history.clear()
