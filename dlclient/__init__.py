"""
dlclient — a console chat client for Direct Line bots.

- Opens a conversation with a bot secret (token exchange + conversation start)
- Sends console input as messages; "exit" quits
- Streams the bot's replies over a websocket and prints them
- Renders hero/thumbnail cards as bordered text and opens images in a viewer
"""

from dlclient.activity import Activity, Attachment, AttachmentKind, Card, CardAction, ChannelAccount, StreamFrame
from dlclient.app import ConsoleApp
from dlclient.channels.outbound import OutboundChannel
from dlclient.channels.stream import StreamListener, StreamState
from dlclient.client import DirectLineClient
from dlclient.config import ClientConfig
from dlclient.console import Console
from dlclient.errors import (
    BootstrapError,
    ConfigurationError,
    DirectLineError,
    MissingSecretError,
    OperationError,
    SchemaError,
)
from dlclient.render import ActivityRenderer, content_line, render_card
from dlclient.session import Session, SessionBootstrapper

__version__ = "0.1.0"
__all__ = [
    # App
    "ConsoleApp", "ClientConfig", "Console",
    # Session
    "Session", "SessionBootstrapper", "DirectLineClient",
    # Channels
    "OutboundChannel", "StreamListener", "StreamState",
    # Model
    "Activity", "Attachment", "AttachmentKind", "Card", "CardAction", "ChannelAccount", "StreamFrame",
    # Rendering
    "ActivityRenderer", "content_line", "render_card",
    # Errors
    "DirectLineError", "ConfigurationError", "MissingSecretError",
    "SchemaError", "OperationError", "BootstrapError",
]
