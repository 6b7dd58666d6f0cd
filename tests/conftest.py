from __future__ import annotations

import asyncio
import io
import json
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from loguru import logger

from dlclient.activity import Activity
from dlclient.config import ClientConfig
from dlclient.console import Console


SELF_ID = "DirectLineClient"


def directline_spec(host: str, scheme: str = "https") -> dict[str, Any]:
    """Subset of the Direct Line 3.0 Swagger document."""
    return {
        "swagger": "2.0",
        "info": {"title": "Bot Connector - Direct Line API - v3.0", "version": "v3"},
        "host": host,
        "schemes": [scheme],
        "paths": {
            "/v3/directline/conversations": {
                "post": {
                    "operationId": "Conversations_StartConversation",
                    "parameters": [],
                },
            },
            "/v3/directline/conversations/{conversationId}/activities": {
                "get": {
                    "operationId": "Conversations_GetActivities",
                    "parameters": [
                        {"name": "conversationId", "in": "path", "required": True, "type": "string"},
                        {"name": "watermark", "in": "query", "required": False, "type": "string"},
                    ],
                },
                "post": {
                    "operationId": "Conversations_PostActivity",
                    "parameters": [
                        {"name": "conversationId", "in": "path", "required": True, "type": "string"},
                        {"name": "activity", "in": "body", "required": True, "schema": {}},
                    ],
                },
            },
            "/v3/directline/tokens/generate": {
                "post": {
                    "operationId": "Tokens_GenerateTokenForNewConversation",
                    "parameters": [],
                },
            },
        },
    }


class FakeConsole(Console):
    """Console fed from a queue, writing into a buffer."""

    def __init__(self, prompt: str = "Command> ", *, tty: bool = False) -> None:
        self.buffer = _TtyBuffer() if tty else io.StringIO()
        super().__init__(prompt=prompt, stdout=self.buffer)
        self._lines: asyncio.Queue[str | None] = asyncio.Queue()

    def feed(self, *lines: str | None) -> None:
        for line in lines:
            self._lines.put_nowait(line)

    async def read_line(self) -> str | None:
        await asyncio.sleep(0)
        return await self._lines.get()

    @property
    def output(self) -> str:
        return self.buffer.getvalue()


class _TtyBuffer(io.StringIO):
    def isatty(self) -> bool:
        return True


class FakeClient:
    """Records post_activity calls; optionally fails the first N."""

    def __init__(self, fail: int = 0) -> None:
        self.posts: list[tuple[str, Activity]] = []
        self._fail = fail

    async def post_activity(self, conversation_id: str, activity: Activity) -> Any:
        if self._fail:
            self._fail -= 1
            raise RuntimeError("service unavailable")
        self.posts.append((conversation_id, activity))
        return {"id": f"{conversation_id}|{len(self.posts)}"}


class FakeRelay:
    """In-process Direct Line service: swagger, token, conversations, stream."""

    def __init__(self, secret: str = "s1", token: str = "t1") -> None:
        self.secret = secret
        self.token = token
        self.posts: list[tuple[str, dict[str, Any]]] = []
        self.posted = asyncio.Event()
        self.ws: web.WebSocketResponse | None = None
        self.ws_ready = asyncio.Event()

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/swagger.json", self._swagger)
        app.router.add_post("/v3/directline/tokens/generate", self._generate_token)
        app.router.add_post("/v3/directline/conversations", self._start_conversation)
        app.router.add_post(
            "/v3/directline/conversations/{conversationId}/activities", self._post_activity
        )
        app.router.add_get("/stream", self._stream)
        return app

    async def push(self, frame: dict[str, Any]) -> None:
        assert self.ws is not None
        await self.ws.send_str(json.dumps(frame))

    async def _swagger(self, request: web.Request) -> web.Response:
        spec = directline_spec(request.host, scheme="http")
        # padded on purpose: the client strips before parsing
        return web.Response(text="\n  " + json.dumps(spec) + "\n", content_type="text/plain")

    async def _generate_token(self, request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != f"Bearer {self.secret}":
            return web.json_response({"error": {"code": "BadArgument"}}, status=403)
        return web.json_response({"token": self.token, "expires_in": 1800})

    async def _start_conversation(self, request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return web.json_response({"error": {"code": "TokenInvalid"}}, status=403)
        return web.json_response(
            {
                "conversationId": "c1",
                "token": self.token,
                "streamUrl": f"ws://{request.host}/stream",
            },
            status=201,
        )

    async def _post_activity(self, request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return web.json_response({"error": {"code": "TokenInvalid"}}, status=403)
        self.posts.append((request.match_info["conversationId"], await request.json()))
        self.posted.set()
        return web.json_response({"id": f"c1|{len(self.posts)}"})

    async def _stream(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self.ws = ws
        self.ws_ready.set()
        async for _ in ws:
            pass
        return ws


@pytest_asyncio.fixture
async def relay_server():
    relay = FakeRelay()
    server = TestServer(relay.app())
    await server.start_server()
    try:
        yield relay, server
    finally:
        await server.close()


def make_config(server: TestServer, **overrides: Any) -> ClientConfig:
    values: dict[str, Any] = {
        "secret": "s1",
        "spec_url": str(server.make_url("/swagger.json")),
        "request_timeout": 5.0,
    }
    values.update(overrides)
    return ClientConfig(**values)


@pytest.fixture
def log_messages():
    """Collect loguru records at WARNING and above."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


async def wait_for_output(console: FakeConsole, text: str, timeout: float = 5.0) -> None:
    async def _poll() -> None:
        while text not in console.output:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)
