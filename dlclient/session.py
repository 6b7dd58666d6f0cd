"""
Conversation session setup.

Bootstrapping runs once, before any console interaction:
    1. fetch the Direct Line API description and build a client from it
    2. exchange the bot secret for a conversation token
    3. install the token as the client's credential
    4. start a conversation
Any failure aborts startup; there is no retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, NoReturn, TypeVar

import aiohttp
from loguru import logger

from dlclient.client import DirectLineClient
from dlclient.errors import BootstrapError, OperationError


T = TypeVar("T")


@dataclass(frozen=True)
class Session:
    """An open conversation. Built once, shared read-only by both loops."""

    conversation_id: str
    stream_url: str
    access_token: str

    def __repr__(self) -> str:
        return f"Session(conversation_id={self.conversation_id!r}, stream_url={self.stream_url!r})"


class SessionBootstrapper:
    """Turns a bot secret into an authorized client and an open conversation."""

    def __init__(
        self,
        http: aiohttp.ClientSession,
        secret: str,
        spec_url: str,
        *,
        base_url: str | None = None,
    ) -> None:
        self._http = http
        self._secret = secret
        self._spec_url = spec_url
        self._base_url = base_url

    async def bootstrap(self) -> tuple[DirectLineClient, Session]:
        client = await self._step(
            "fetch API description",
            DirectLineClient.from_url(self._http, self._spec_url, base_url=self._base_url),
        )

        token = await self._step("generate token", client.generate_token(self._secret))
        client.set_authorization(token)

        conversation = await self._step("start conversation", client.start_conversation())
        stream_url = conversation.get("streamUrl")
        if not stream_url:
            self._fail(
                "start conversation",
                OperationError("Conversations_StartConversation", 200, conversation),
            )

        session = Session(
            conversation_id=conversation["conversationId"],
            stream_url=stream_url,
            access_token=conversation.get("token") or token,
        )
        logger.info(f"[session] Conversation started: {session.conversation_id}")
        return client, session

    async def _step(self, name: str, awaitable: Awaitable[T]) -> T:
        logger.debug(f"[session] {name}...")
        try:
            return await awaitable
        except Exception as exc:
            self._fail(name, exc)

    @staticmethod
    def _fail(step: str, exc: Exception) -> NoReturn:
        logger.error(f"[session] Error initializing DirectLine client ({step}): {exc}")
        raise BootstrapError(step, exc) from exc
