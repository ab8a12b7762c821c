"""Notification formatting for the Telegram Bot API (HTML parse mode).

Keeping formatting here prevents drift between the processor and the
delivery adapter and keeps every message inside Telegram's size limit.
"""

from __future__ import annotations

import html
import re

MAX_MESSAGE_CHARS = 4000
ELLIPSIS = "..."

_EMOJI = {
    "folder": "\U0001F4E5 ",
    "sender": "\U0001F464 ",
    "subject": "\U0001F4E7 ",
}


def truncate_chars(text: str, max_chars: int) -> str:
    """Clip ``text`` to ``max_chars`` characters, marking the cut with an ellipsis."""

    if len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS


def cut_at_marker(text: str, marker: str) -> str:
    """Drop everything from the first case-insensitive occurrence of ``marker``."""

    if not marker:
        return text
    found = re.search(re.escape(marker), text, flags=re.IGNORECASE)
    if found is None:
        return text
    return text[: found.start()]


def format_message(
    folder: str,
    sender: str,
    subject: str,
    body: str,
    max_length: int,
    *,
    use_emojis: bool = False,
    cut_text: str = "",
) -> str:
    """Build the HTML notification for one mail item.

    Order matters: the body is clipped to ``max_length`` first, then the cut
    marker is applied to the composed text, then the whole message is capped
    to MAX_MESSAGE_CHARS.
    """

    def prefix(kind: str) -> str:
        return _EMOJI[kind] if use_emojis else ""

    parts = [
        f"{prefix('folder')}<b>Folder:</b> {html.escape(folder)}\n",
        f"{prefix('sender')}<b>From:</b> {html.escape(sender)}\n",
        f"{prefix('subject')}<b>Subject:</b> {html.escape(subject)}\n",
    ]

    if max_length != 0:
        escaped_body = html.escape(body)
        if max_length > 0:
            escaped_body = truncate_chars(escaped_body, max_length)
        parts.append(f"<i>Message:</i>\n{escaped_body}")

    message = cut_at_marker("".join(parts), cut_text)
    return truncate_chars(message, MAX_MESSAGE_CHARS)
