"""
Subscriber implementations.

WebSocketSubscriber pushes JSON frames down a live connection;
QueueSubscriber collects events on an asyncio queue for in-process
listeners and tests.
"""

import asyncio
import uuid
from typing import Any, Optional

from starlette.websockets import WebSocket

from wlogistics.schemas import ServerFrame
from wlogistics.services.realtime.base import BaseSubscriber


class WebSocketSubscriber(BaseSubscriber):
    """Wraps an accepted websocket connection."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._id = f"ws_{uuid.uuid4().hex[:12]}"

    @property
    def subscriber_id(self) -> str:
        return self._id

    async def send(self, event: str, payload: dict[str, Any]) -> None:
        frame = ServerFrame(event=event, data=payload)
        await self.websocket.send_json(frame.model_dump(by_alias=True))


class QueueSubscriber(BaseSubscriber):
    """
    In-process subscriber backed by an asyncio queue.

    Example:
        >>> listener = QueueSubscriber()
        >>> broadcaster.subscribe(listener, "t_wis")
        >>> event, payload = await listener.receive(timeout=1)
    """

    def __init__(self, name: Optional[str] = None):
        self._id = name or f"queue_{uuid.uuid4().hex[:12]}"
        self.queue: asyncio.Queue[tuple[str, dict[str, Any]]] = asyncio.Queue()

    @property
    def subscriber_id(self) -> str:
        return self._id

    async def send(self, event: str, payload: dict[str, Any]) -> None:
        await self.queue.put((event, payload))

    async def receive(self, timeout: Optional[float] = None) -> tuple[str, dict[str, Any]]:
        """Wait for the next event; raises asyncio.TimeoutError on timeout."""
        return await asyncio.wait_for(self.queue.get(), timeout)

    def drain(self) -> list[tuple[str, dict[str, Any]]]:
        """Return every queued event without waiting."""
        received = []
        while not self.queue.empty():
            received.append(self.queue.get_nowait())
        return received
