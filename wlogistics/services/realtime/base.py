"""
Realtime Broadcasting Abstract Base Classes

Defines the subscriber and broadcaster interfaces plus the result types
returned from a publish. Delivery is fire-and-forget: a publish reports
how many subscribers it reached but never retries or replays.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


# Event kinds emitted by the order service
ORDER_CREATED = "order.created"
ORDER_UPDATED = "order.updated"
ORDER_DELETED = "order.deleted"


@dataclass
class PublishResult:
    """Outcome of one publish call."""
    room: Optional[str]
    event: str
    delivered: int = 0
    dropped: int = 0


@dataclass
class RealtimeEvent:
    """A published event as kept in the broadcaster history."""
    room: str
    event: str
    payload: dict[str, Any]
    delivered: int
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class BaseSubscriber(ABC):
    """A listener that can sit in one or more tenant rooms."""

    @property
    @abstractmethod
    def subscriber_id(self) -> str:
        """Return a stable identifier used in logs."""
        pass

    @abstractmethod
    async def send(self, event: str, payload: dict[str, Any]) -> None:
        """Deliver one event; raise if the listener is gone."""
        pass


class BaseBroadcaster(ABC):
    """Abstract base class for tenant-scoped broadcasters."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def subscribe(self, subscriber: BaseSubscriber, tenant_id: Optional[str]) -> bool:
        """Register a subscriber in a tenant room; False when ignored."""
        pass

    @abstractmethod
    def unsubscribe(self, subscriber: BaseSubscriber, tenant_id: Optional[str] = None) -> None:
        """Leave one room, or every room when tenant_id is None."""
        pass

    @abstractmethod
    async def publish(
        self,
        tenant_id: Optional[str],
        event: str,
        payload: dict[str, Any],
    ) -> PublishResult:
        """Deliver payload to everyone currently in the tenant room."""
        pass

    @abstractmethod
    def events(self, room: Optional[str] = None) -> list[RealtimeEvent]:
        """Return recently published events, optionally for one room."""
        pass
