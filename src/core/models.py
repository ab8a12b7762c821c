"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to COM types or HTTP payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MailboxSession:
    """Live connection to the mail provider, owned by one cycle."""

    application: Any
    namespace: Any


@dataclass(frozen=True)
class MailItem:
    """Read-only snapshot of an unread mail item."""

    entry_id: str
    sender_name: str
    sender_email: str
    subject: str
    body: str

    @property
    def sender(self) -> str:
        # Exchange senders often carry the display name in both fields.
        if self.sender_name and self.sender_name != self.sender_email:
            return f"{self.sender_name} <{self.sender_email}>"
        return self.sender_email


@dataclass(frozen=True)
class Notification:
    chat_id: str
    text: str


@dataclass
class CycleReport:
    """Counters collected during one poll cycle."""

    folders_resolved: int = 0
    folders_missing: int = 0
    items_seen: int = 0
    sent: int = 0
    duplicates: int = 0
    failed: int = 0
