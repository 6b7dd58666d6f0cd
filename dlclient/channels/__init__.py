"""
Channel package.
"""

from dlclient.channels.base import Channel
from dlclient.channels.outbound import OutboundChannel, is_exit_command
from dlclient.channels.stream import StreamListener, StreamState

__all__ = [
    "Channel",
    "OutboundChannel",
    "is_exit_command",
    "StreamListener",
    "StreamState",
]
