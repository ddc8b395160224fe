"""
Objection Bridge: real-time objection handling over a WebSocket.

This module handles:
- Receiving objection events from the browser client
- Forwarding each objection to the completion service
- Persisting the objection/suggestion pair
- Emitting the suggestion back to the same connection

Frames are JSON envelopes shaped like Socket.IO events:
    client -> server: {"event": "objection", "data": "price is too high"}
    server -> client: {"event": "suggestion", "data": "..."}
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect

from ..storage import Objection, RelayStore
from .suggester import ObjectionSuggester

logger = logging.getLogger(__name__)


OBJECTION_EVENT = "objection"
SUGGESTION_EVENT = "suggestion"
FAILED_SUGGESTION = "Failed to generate suggestion."


class ConnectionState(str, Enum):
    """Lifecycle of one client connection."""
    CONNECTED = "connected"
    PROCESSING = "processing"
    DISCONNECTED = "disconnected"


class ObjectionBridge:
    """
    Bridges one client connection to the completion service.

    Every inbound objection runs in its own task, so several objections on
    the same connection are processed concurrently and suggestions go out in
    completion order, not request order.

    Persistence policy: the objection record is awaited before the suggestion
    is sent. A storage failure fails the whole round trip and the client gets
    FAILED_SUGGESTION instead.
    """

    def __init__(
        self,
        suggester: ObjectionSuggester,
        store: RelayStore,
        connection_id: Optional[str] = None,
        pending: Optional[set] = None,
    ):
        """
        Initialize the bridge.

        Args:
            suggester: Shared completion client
            store: Shared persistence adapter
            connection_id: Short id used in log lines
            pending: App-wide set that also tracks this connection's tasks,
                so they can be cancelled at shutdown
        """
        self.suggester = suggester
        self.store = store
        self.connection_id = connection_id

        self._websocket: Optional[WebSocket] = None
        self._send_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._pending = pending if pending is not None else set()
        self._disconnected = False

    @property
    def in_flight(self) -> int:
        """Number of objections still being processed."""
        return len(self._tasks)

    @property
    def state(self) -> ConnectionState:
        if self._disconnected:
            return ConnectionState.DISCONNECTED
        if self._tasks:
            return ConnectionState.PROCESSING
        return ConnectionState.CONNECTED

    async def handle_objection(self, message: str) -> str:
        """
        Produce the suggestion for one objection.

        Never raises: any failure (completion, storage, validation) is logged
        and turned into FAILED_SUGGESTION, with nothing persisted.

        Returns:
            The suggestion text to emit
        """
        try:
            logger.info(f"Processing objection: {message}")

            suggestion = await self.suggester.suggest(message)
            logger.info(f"AI suggestion: {suggestion}")

            record = Objection(message=message, response=suggestion)
            await asyncio.to_thread(self.store.insert_objection, record)

            return suggestion
        except Exception as e:
            logger.error(f"Failed to generate AI suggestion: {e}")
            return FAILED_SUGGESTION

    async def run(self, websocket: WebSocket) -> None:
        """
        Serve the connection until the client disconnects.

        Objections still in flight at disconnect are left to finish; their
        records are still written but the suggestion cannot be delivered.
        Text frames are dispatched; binary frames are logged and ignored.

        Args:
            websocket: An accepted WebSocket
        """
        self._websocket = websocket
        logger.info(f"A user connected ({self.connection_id})")

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break

                raw = message.get("text")
                if raw is None:
                    logger.warning(f"Ignoring binary frame on {self.connection_id}")
                    continue
                self._dispatch(raw)
        finally:
            self._disconnected = True
            logger.info(
                f"A user disconnected ({self.connection_id}), "
                f"{self.in_flight} objection(s) still in flight"
            )

    def _dispatch(self, raw: str) -> None:
        """Route one inbound frame to its event handler."""
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring non-JSON frame: {raw[:100]}")
            return

        if not isinstance(frame, dict):
            logger.warning(f"Ignoring frame without an event envelope: {raw[:100]}")
            return

        event = frame.get("event")
        if event != OBJECTION_EVENT:
            logger.debug(f"Ignoring unknown event: {event}")
            return

        task = asyncio.create_task(self._process(frame.get("data")))
        self._tasks.add(task)
        self._pending.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(self._pending.discard)

    async def _process(self, message) -> None:
        """Handle one objection event and emit the result."""
        if not isinstance(message, str) or not message:
            logger.error(f"Invalid objection payload: {message!r}")
            suggestion = FAILED_SUGGESTION
        else:
            suggestion = await self.handle_objection(message)

        await self._emit(SUGGESTION_EVENT, suggestion)

    async def _emit(self, event: str, data: str) -> None:
        """Send an event to this connection only."""
        if self._disconnected or self._websocket is None:
            logger.warning(f"Dropping {event} for closed connection {self.connection_id}")
            return

        try:
            async with self._send_lock:
                await self._websocket.send_json({"event": event, "data": data})
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning(f"Could not deliver {event} to {self.connection_id}: {e}")
