"""
Inbound stream listener.

Opens the conversation's websocket stream and prints what the bot sends.
The receive side only parses frames and queues them; a single consumer
renders them in arrival order. Messages the client posted itself come
back on the stream and are dropped before rendering.

States:

    IDLE → CONNECTING → CONNECTED → DISCONNECTED
                      ↘ FAILED

There is no reconnect: after DISCONNECTED or FAILED the session keeps
running with sending only.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any, Awaitable, Callable

import aiohttp
from loguru import logger

from dlclient.activity import Activity, StreamFrame
from dlclient.channels.base import Channel
from dlclient.console import Console
from dlclient.render import ActivityRenderer
from dlclient.session import Session


class StreamState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    FAILED = "failed"


_TRANSITIONS: dict[StreamState, frozenset[StreamState]] = {
    StreamState.IDLE: frozenset({StreamState.CONNECTING}),
    StreamState.CONNECTING: frozenset({StreamState.CONNECTED, StreamState.FAILED}),
    StreamState.CONNECTED: frozenset({StreamState.DISCONNECTED}),
    StreamState.DISCONNECTED: frozenset(),
    StreamState.FAILED: frozenset(),
}

# Seconds to wait for the close handshake on shutdown
CLOSE_TIMEOUT = 1.0

# (url) -> websocket; aiohttp.ClientSession.ws_connect fits
Connector = Callable[[str], Awaitable[Any]]


def parse_frame(data: str | None) -> StreamFrame | None:
    """Decode one text frame. Returns None for empty or malformed frames."""
    if not data:
        return None
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        logger.warning(f"[stream] Ignoring malformed frame: {exc}")
        return None
    if not isinstance(payload, dict):
        logger.warning(f"[stream] Ignoring frame that is not an object: {data[:80]!r}")
        return None
    return StreamFrame.from_dict(payload)


class StreamListener(Channel):
    """Receives activities from the conversation stream and renders them."""

    name = "stream"
    close_timeout: float = CLOSE_TIMEOUT

    def __init__(
        self,
        session: Session,
        console: Console,
        renderer: ActivityRenderer,
        user_id: str,
        connect: Connector,
    ) -> None:
        self._session = session
        self._console = console
        self._renderer = renderer
        self._user_id = user_id
        self._connect = connect
        self._state = StreamState.IDLE
        self._queue: asyncio.Queue[StreamFrame | None] = asyncio.Queue()
        self._ws: Any = None

    @property
    def state(self) -> StreamState:
        return self._state

    def _transition(self, new: StreamState) -> None:
        if new not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid stream transition {self._state.value} -> {new.value}")
        logger.debug(f"[stream] {self._state.value} -> {new.value}")
        self._state = new

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Connect, then receive and render frames until the stream ends."""
        logger.info(
            f"Starting WebSocket Client for message streaming on conversationId: "
            f"{self._session.conversation_id}"
        )
        consumer = asyncio.ensure_future(self._consume())
        try:
            await self._receive()
        finally:
            self._queue.put_nowait(None)
            await consumer

    async def stop(self) -> None:
        if self._ws is not None:
            await self._close(self._ws)

    async def _close(self, ws: Any) -> None:
        """Close without waiting more than CLOSE_TIMEOUT for the peer's close frame."""
        if ws.closed:
            return
        try:
            await asyncio.wait_for(ws.close(), self.close_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[stream] No close reply within {self.close_timeout}s, dropping connection")

    # ------------------------------------------------------------------
    # Receive
    # ------------------------------------------------------------------

    async def _receive(self) -> None:
        self._transition(StreamState.CONNECTING)
        try:
            ws = await self._connect(self._session.stream_url)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(f"[stream] Connect Error: {exc}")
            self._transition(StreamState.FAILED)
            return

        self._ws = ws
        self._transition(StreamState.CONNECTED)
        logger.info("WebSocket Client Connected")

        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    logger.debug(f"[stream] frame: {msg.data[:200]!r}")
                    frame = parse_frame(msg.data)
                    if frame is not None:
                        self._queue.put_nowait(frame)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.error(f"[stream] Connection Error: {ws.exception()}")
                    break
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(f"[stream] Connection Error: {exc}")
        finally:
            self._transition(StreamState.DISCONNECTED)
            logger.info("WebSocket Client Disconnected")
            await self._close(ws)

    # ------------------------------------------------------------------
    # Consume
    # ------------------------------------------------------------------

    async def _consume(self) -> None:
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            try:
                self.handle_frame(frame)
            except Exception as exc:
                logger.error(f"[stream] Failed to render frame: {exc}")

    def handle_frame(self, frame: StreamFrame) -> list[Activity]:
        """Render the frame's activities from others. Returns what was rendered."""
        if not frame.activities:
            return []

        others = [a for a in frame.activities if not a.is_from(self._user_id)]
        if not others:
            return []

        self._console.clear_line()
        for activity in others:
            self._renderer.render(activity)
        self._console.show_prompt()
        return others
