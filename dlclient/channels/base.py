"""
Abstract base class for the session's message channels.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Channel(ABC):
    """One direction of the conversation, run as its own task."""

    name: str = "base"

    @abstractmethod
    async def start(self) -> None:
        """Run the channel until it finishes or is stopped."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel and release what it owns."""
        ...
