"""
Direct Line activity model.

Activities are the messages exchanged over a conversation. Outbound ones are
built from a line of console input; inbound ones arrive in stream frames.
All types here are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


HERO_CARD = "application/vnd.microsoft.card.hero"
THUMBNAIL_CARD = "application/vnd.microsoft.card.thumbnail"

OPEN_URL = "openUrl"


class AttachmentKind(str, Enum):
    HERO_CARD = "hero-card"
    THUMBNAIL_CARD = "thumbnail-card"
    IMAGE = "image"
    OTHER = "other"


@dataclass(frozen=True)
class ChannelAccount:
    id: str = ""
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Any) -> "ChannelAccount":
        if not isinstance(data, dict):
            return cls()
        return cls(id=data.get("id") or "", name=data.get("name") or "")


@dataclass(frozen=True)
class CardAction:
    """A card button."""

    title: str = ""
    type: str = ""
    value: str | None = None

    @property
    def is_link(self) -> bool:
        return self.type == OPEN_URL and bool(self.value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CardAction":
        value = data.get("value")
        return cls(
            title=data.get("title") or "",
            type=data.get("type") or "",
            value=None if value is None else str(value),
        )


@dataclass(frozen=True)
class Card:
    """Content of a hero or thumbnail card."""

    title: str | None = None
    subtitle: str | None = None
    text: str | None = None
    buttons: tuple[CardAction, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "Card":
        if not isinstance(data, dict):
            return cls()
        return cls(
            title=data.get("title"),
            subtitle=data.get("subtitle"),
            text=data.get("text"),
            buttons=tuple(
                CardAction.from_dict(b) for b in data.get("buttons") or [] if isinstance(b, dict)
            ),
        )


@dataclass(frozen=True)
class Attachment:
    content_type: str = ""
    content: Any = None
    content_url: str | None = None
    name: str | None = None

    @property
    def kind(self) -> AttachmentKind:
        if self.content_type == HERO_CARD:
            return AttachmentKind.HERO_CARD
        if self.content_type == THUMBNAIL_CARD:
            return AttachmentKind.THUMBNAIL_CARD
        if self.content_type.startswith("image/"):
            return AttachmentKind.IMAGE
        return AttachmentKind.OTHER

    @property
    def card(self) -> Card:
        return Card.from_dict(self.content)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"contentType": self.content_type}
        if self.content is not None:
            d["content"] = self.content
        if self.content_url:
            d["contentUrl"] = self.content_url
        if self.name:
            d["name"] = self.name
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        return cls(
            content_type=data.get("contentType") or "",
            content=data.get("content"),
            content_url=data.get("contentUrl"),
            name=data.get("name"),
        )


@dataclass(frozen=True)
class Activity:
    """One message or event in a conversation."""

    type: str = "message"
    text: str | None = None
    from_: ChannelAccount = field(default_factory=ChannelAccount)
    attachments: tuple[Attachment, ...] = ()
    text_format: str | None = None
    id: str | None = None

    @classmethod
    def message(cls, text: str, user_id: str) -> "Activity":
        """Build an outbound plain-text message sent as ``user_id``."""
        return cls(
            type="message",
            text=text,
            text_format="plain",
            from_=ChannelAccount(id=user_id, name=user_id),
        )

    def is_from(self, user_id: str) -> bool:
        return self.from_.id == user_id

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type, "from": self.from_.to_dict()}
        if self.text_format:
            d["textFormat"] = self.text_format
        if self.text is not None:
            d["text"] = self.text
        if self.attachments:
            d["attachments"] = [a.to_dict() for a in self.attachments]
        if self.id:
            d["id"] = self.id
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Activity":
        return cls(
            type=data.get("type") or "message",
            text=data.get("text"),
            from_=ChannelAccount.from_dict(data.get("from")),
            attachments=tuple(
                Attachment.from_dict(a) for a in data.get("attachments") or [] if isinstance(a, dict)
            ),
            text_format=data.get("textFormat"),
            id=data.get("id"),
        )


@dataclass(frozen=True)
class StreamFrame:
    """One push message from the conversation stream."""

    activities: tuple[Activity, ...] = ()
    watermark: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StreamFrame":
        return cls(
            activities=tuple(
                Activity.from_dict(a) for a in data.get("activities") or [] if isinstance(a, dict)
            ),
            watermark=data.get("watermark"),
        )
