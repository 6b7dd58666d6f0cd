"""
Outbound channel: console lines → conversation messages.

Each non-empty line is posted as a plain-text message in the background;
the prompt comes back before the service acknowledges the send. Typing
"exit" (any case) or closing input ends the session.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from loguru import logger

from dlclient.activity import Activity
from dlclient.channels.base import Channel
from dlclient.console import Console
from dlclient.session import Session


EXIT_COMMAND = "exit"


class ActivityPoster(Protocol):
    async def post_activity(self, conversation_id: str, activity: Activity) -> Any: ...


def is_exit_command(line: str) -> bool:
    return line.strip().lower() == EXIT_COMMAND


class OutboundChannel(Channel):
    """Reads console input and posts it to the conversation."""

    name = "outbound"

    def __init__(
        self,
        client: ActivityPoster,
        session: Session,
        console: Console,
        user_id: str,
    ) -> None:
        self._client = client
        self._session = session
        self._console = console
        self._user_id = user_id
        self._running = False
        self._pending: set[asyncio.Task] = set()

    async def start(self) -> None:
        """Read lines until exit or end of input."""
        self._running = True
        self._console.show_prompt()

        while self._running:
            line = await self._console.read_line()
            if line is None:
                logger.debug("[outbound] End of input")
                break

            text = line.strip()
            if not text:
                continue
            if is_exit_command(text):
                logger.debug("[outbound] Exit requested")
                break

            self.send(text)
            self._console.show_prompt()

        self._running = False

    def send(self, text: str) -> asyncio.Task:
        """Post ``text`` as a message without waiting for the result."""
        activity = Activity.message(text, self._user_id)
        task = asyncio.ensure_future(self._post(activity))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _post(self, activity: Activity) -> None:
        try:
            await self._client.post_activity(self._session.conversation_id, activity)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(f"[outbound] Error sending message: {exc}")

    async def stop(self) -> None:
        """Stop reading and abandon sends still in flight."""
        self._running = False
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.debug(f"[outbound] Abandoned {len(pending)} in-flight send(s)")
