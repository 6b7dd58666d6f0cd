"""
Console app — wires the session to the two channels.

Startup order:
    bootstrap (token + conversation) → stream listener task + outbound loop

The outbound loop owns the session lifetime: when it returns (user typed
"exit" or input closed), in-flight sends and the stream are abandoned.
"""

from __future__ import annotations

import asyncio

import aiohttp
from loguru import logger

from dlclient.channels.outbound import OutboundChannel
from dlclient.channels.stream import StreamListener
from dlclient.client import DirectLineClient
from dlclient.config import ClientConfig
from dlclient.console import Console
from dlclient.render import ActivityRenderer, ImageOpener, open_in_viewer
from dlclient.session import Session, SessionBootstrapper


# Seconds to let the stream listener finish after its socket is closed
STOP_TIMEOUT = 2.0


class ConsoleApp:
    """Interactive console session against one Direct Line bot.

    Usage::

        app = ConsoleApp(ClientConfig.from_env())
        await app.run()
    """

    stop_timeout: float = STOP_TIMEOUT

    def __init__(
        self,
        config: ClientConfig,
        console: Console | None = None,
        *,
        open_image: ImageOpener = open_in_viewer,
        base_url: str | None = None,
    ) -> None:
        self.config = config
        self.console = console or Console(prompt=config.prompt)
        self._open_image = open_image
        self._base_url = base_url

        self.client: DirectLineClient | None = None
        self.session: Session | None = None
        self.outbound: OutboundChannel | None = None
        self.listener: StreamListener | None = None

    async def run(self) -> None:
        """Bootstrap, then run until the user exits.

        Raises BootstrapError if the conversation could not be opened.
        """
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as http:
            bootstrapper = SessionBootstrapper(
                http,
                self.config.secret,
                self.config.spec_url,
                base_url=self._base_url,
            )
            self.client, self.session = await bootstrapper.bootstrap()

            renderer = ActivityRenderer(
                self.console,
                open_image=self._open_image,
                card_width=self.config.card_width,
            )
            self.outbound = OutboundChannel(
                self.client, self.session, self.console, self.config.user_id
            )
            self.listener = StreamListener(
                self.session,
                self.console,
                renderer,
                self.config.user_id,
                connect=http.ws_connect,
            )

            stream_task = asyncio.ensure_future(self.listener.start())
            try:
                await self.outbound.start()
            finally:
                await self._shutdown(stream_task)

    async def _shutdown(self, stream_task: asyncio.Future) -> None:
        if self.outbound is not None:
            await self.outbound.stop()
        if self.listener is not None:
            try:
                await self.listener.stop()
            except Exception as exc:
                logger.warning(f"[app] Error stopping stream: {exc}")
        try:
            await asyncio.wait_for(stream_task, self.stop_timeout)
        except asyncio.TimeoutError:
            # wait_for cancels the task
            logger.warning("[app] Stream did not stop in time, abandoned")
        except Exception as exc:
            logger.warning(f"[app] Stream ended with error: {exc}")
        logger.debug("[app] Session closed")
