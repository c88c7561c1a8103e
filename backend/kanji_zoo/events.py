from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Event(BaseModel):
    """One outbound message: ``{"event": name, "data": payload}`` on the wire."""

    name: str
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        data = self.data
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json", by_alias=True)
        elif isinstance(data, list):
            data = [d.model_dump(mode="json", by_alias=True) if isinstance(d, BaseModel) else d for d in data]
        return {"event": self.name, "data": data}


CommandHandler = Callable[[str, Any], None]


class Gateway(Protocol):
    def send_to_all(self, event: Event) -> None: ...

    def send_to_one(self, conn_id: str, event: Event) -> None: ...


class WebSocketGateway:
    """Fan-out to connected sockets.

    Sends never block the caller: each connection has its own outbox that a
    writer task drains in order (see ``main.ws_endpoint``).
    """

    def __init__(self):
        self._outboxes: Dict[str, asyncio.Queue[Event]] = {}
        self._handler: Optional[CommandHandler] = None

    def on_command(self, handler: CommandHandler) -> None:
        self._handler = handler

    def connect(self, conn_id: str) -> asyncio.Queue[Event]:
        outbox: asyncio.Queue[Event] = asyncio.Queue()
        self._outboxes[conn_id] = outbox
        return outbox

    def disconnect(self, conn_id: str) -> None:
        self._outboxes.pop(conn_id, None)

    def receive(self, conn_id: str, message: Any) -> None:
        if self._handler is None:
            logger.warning("no command handler registered; dropping %r from %s", message, conn_id)
            return
        self._handler(conn_id, message)

    def send_to_all(self, event: Event) -> None:
        for outbox in self._outboxes.values():
            outbox.put_nowait(event)

    def send_to_one(self, conn_id: str, event: Event) -> None:
        outbox = self._outboxes.get(conn_id)
        if outbox is None:
            logger.debug("send_to_one: %s is gone, dropping %s", conn_id, event.name)
            return
        outbox.put_nowait(event)

    @property
    def connection_count(self) -> int:
        return len(self._outboxes)
