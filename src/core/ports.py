"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the mail provider, its process and
the notification sink so that the core can run against fakes in tests and
against Outlook COM in production.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol

from core.models import MailItem


class MailboxPort(Protocol):
    """Handle-level access to the mail provider.

    Every handle returned by this port is owned by the caller and must be
    passed to ``release`` once it is no longer needed.
    """

    def thread_scope(self) -> AbstractContextManager[None]:
        ...

    def attach_or_create(self) -> Any:
        ...

    def get_namespace(self, application: Any) -> Any:
        ...

    def get_default_folder(self, namespace: Any, folder_id: int) -> Any:
        ...

    def folder_count(self, parent: Any) -> int:
        ...

    def folder_at(self, parent: Any, index: int) -> Any:
        ...

    def folder_name(self, folder: Any) -> str:
        ...

    def restrict_unread(self, folder: Any) -> Any:
        ...

    def item_count(self, items: Any) -> int:
        ...

    def item_at(self, items: Any, index: int) -> Any:
        ...

    def entry_id(self, item: Any) -> str:
        ...

    def read_item(self, item: Any) -> MailItem:
        ...

    def release(self, handle: Any) -> None:
        ...


class ProviderProcessPort(Protocol):
    """Operating-system view of the provider process."""

    def is_running(self) -> bool:
        ...

    def launch(self) -> None:
        ...

    def kill_all(self) -> int:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the core pipeline."""

    def send(self, text: str, chat_id: str) -> None:
        ...
