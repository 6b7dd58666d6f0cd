from __future__ import annotations

import asyncio

import pytest

from dlclient.app import ConsoleApp
from dlclient.channels.stream import StreamState
from dlclient.config import ClientConfig
from dlclient.errors import BootstrapError

from tests.conftest import SELF_ID, FakeConsole, make_config, wait_for_output


@pytest.mark.asyncio
async def test_console_session_end_to_end(relay_server) -> None:
    relay, server = relay_server
    console = FakeConsole()
    opened: list[str] = []
    app = ConsoleApp(make_config(server), console, open_image=opened.append)
    run = asyncio.ensure_future(app.run())

    await asyncio.wait_for(relay.ws_ready.wait(), 5)
    assert app.session is not None
    assert app.session.conversation_id == "c1"

    console.feed("hello\n")
    await asyncio.wait_for(relay.posted.wait(), 5)
    conversation_id, posted = relay.posts[0]
    assert conversation_id == "c1"
    assert posted["text"] == "hello"
    assert posted["from"]["id"] == SELF_ID

    await relay.push(
        {
            "activities": [
                {"type": "message", "from": {"id": SELF_ID}, "text": "hello"},
                {"type": "message", "from": {"id": "bot", "name": "Bot"}, "text": "You said hello"},
                {
                    "type": "message",
                    "from": {"id": "bot", "name": "Bot"},
                    "attachments": [
                        {"contentType": "image/png", "contentUrl": "https://example.com/cat.png"}
                    ],
                },
            ],
            "watermark": "1",
        }
    )
    await wait_for_output(console, "You said hello\n")
    assert console.output.count("hello") == 1

    console.feed(" ExIt \n")
    await asyncio.wait_for(run, 5)

    assert len(relay.posts) == 1
    assert opened == ["https://example.com/cat.png"]
    assert app.listener is not None
    assert app.listener.state is StreamState.DISCONNECTED


@pytest.mark.asyncio
async def test_echo_only_frame_prints_nothing(relay_server) -> None:
    relay, server = relay_server
    console = FakeConsole()
    app = ConsoleApp(make_config(server), console)
    run = asyncio.ensure_future(app.run())

    await asyncio.wait_for(relay.ws_ready.wait(), 5)
    before = console.output
    await relay.push({"activities": [{"from": {"id": SELF_ID}, "text": "echo"}]})
    await relay.push({"activities": [{"from": {"id": "bot"}, "text": "marker"}]})
    await wait_for_output(console, "marker")

    assert console.output == before + "marker\nCommand> "

    console.feed(None)
    await asyncio.wait_for(run, 5)


@pytest.mark.asyncio
async def test_failed_bootstrap_never_reads_input(relay_server) -> None:
    relay, server = relay_server
    console = FakeConsole()
    app = ConsoleApp(make_config(server, secret="wrong"), console)

    with pytest.raises(BootstrapError):
        await app.run()

    assert console.output == ""
    assert app.outbound is None


@pytest.mark.asyncio
async def test_shutdown_abandons_a_stuck_stream(log_messages) -> None:
    app = ConsoleApp(ClientConfig(secret="s1"), FakeConsole())
    app.stop_timeout = 0.05
    stuck = asyncio.ensure_future(asyncio.sleep(3600))

    await asyncio.wait_for(app._shutdown(stuck), 1)

    assert stuck.cancelled()
    assert any("did not stop in time" in m for m in log_messages)
