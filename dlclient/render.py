"""
Text rendering of activities and card attachments.

Cards are drawn as a fixed-width block between a "/***" top border and a
"***/" bottom border. Centering pads both sides by half the free space,
rounded down, so an odd difference leaves the line one column short.
"""

from __future__ import annotations

import webbrowser
from typing import Callable

from loguru import logger

from dlclient.activity import Activity, Attachment, AttachmentKind, Card
from dlclient.console import Console


CARD_WIDTH = 70

ImageOpener = Callable[[str], object]


def content_line(content: str | None, width: int = CARD_WIDTH) -> str:
    content = content or ""
    pad = " " * ((width - len(content)) // 2)
    return pad + content + pad


def render_card(card: Card, width: int = CARD_WIDTH) -> list[str]:
    """Render a hero/thumbnail card as a list of lines."""
    lines = ["/" + "*" * (width + 1)]
    if card.buttons:
        lines.append(f"* {card.title or ''}")
        for button in card.buttons:
            line = f"* {button.title}"
            if button.is_link:
                line += f" ({button.value})"
            lines.append(line)
    else:
        lines.append("*" + content_line(card.title, width) + "*")
        lines.append("*" + " " * width + "*")
        lines.append("*" + content_line(card.text, width) + "*")
    lines.append("*" * (width + 1) + "/")
    return lines


def open_in_viewer(url: str) -> None:
    """Open ``url`` with the platform's default viewer (best effort)."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.warning(f"[render] Could not open {url}: {exc}")
        return
    if not opened:
        logger.warning(f"[render] No viewer available to open {url}")


class ActivityRenderer:
    """Prints activities to the console."""

    def __init__(
        self,
        console: Console,
        *,
        open_image: ImageOpener = open_in_viewer,
        card_width: int = CARD_WIDTH,
    ) -> None:
        self._console = console
        self._open_image = open_image
        self._card_width = card_width

    def render(self, activity: Activity) -> None:
        if activity.text:
            self._console.print_line(activity.text)
        for attachment in activity.attachments:
            self._render_attachment(attachment)

    def _render_attachment(self, attachment: Attachment) -> None:
        kind = attachment.kind
        if kind in (AttachmentKind.HERO_CARD, AttachmentKind.THUMBNAIL_CARD):
            for line in render_card(attachment.card, self._card_width):
                self._console.print_line(line)
        elif kind is AttachmentKind.IMAGE:
            if not attachment.content_url:
                return
            logger.info(f"Opening the requested image {attachment.content_url}")
            self._open_image(attachment.content_url)
        else:
            logger.debug(f"[render] Ignoring attachment of type {attachment.content_type!r}")
