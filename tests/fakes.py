"""Hand-written fakes for the core ports."""

from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from core.errors import DeliveryError, ItemReadError, ProviderInitError
from core.models import MailItem


class FakeItem:
    def __init__(
        self,
        entry_id: str,
        *,
        subject: str = "Hello",
        sender_name: str = "Alice",
        sender_email: str = "alice@example.com",
        body: str = "Body text",
        unread: bool = True,
        broken_entry_id: bool = False,
        broken_fields: bool = False,
    ) -> None:
        self.entry_id = entry_id
        self.subject = subject
        self.sender_name = sender_name
        self.sender_email = sender_email
        self.body = body
        self.unread = unread
        self.broken_entry_id = broken_entry_id
        self.broken_fields = broken_fields


class FakeFolder:
    def __init__(
        self,
        name: str,
        children: Iterable["FakeFolder"] = (),
        items: Iterable[FakeItem] = (),
    ) -> None:
        self.name = name
        self.children = list(children)
        self.items = list(items)


class FakeCollection:
    def __init__(self, items: list[FakeItem]) -> None:
        self.items = items


class FakeApplication:
    pass


class FakeMailbox:
    """In-memory mailbox that tracks every handle it hands out."""

    def __init__(
        self,
        folders: Iterable[FakeFolder] = (),
        inbox: Optional[FakeFolder] = None,
        fail_attach: bool = False,
    ) -> None:
        self.root = FakeFolder("<namespace>", folders)
        self.inbox = inbox or FakeFolder("Inbox")
        self.fail_attach = fail_attach
        self.attach_calls = 0
        self.default_folder_calls: list[int] = []
        self.names_read: list[str] = []
        self.handed: Counter = Counter()
        self.released: Counter = Counter()
        self.thread_scopes = 0

    def _hand_out(self, handle: Any) -> Any:
        self.handed[handle] += 1
        return handle

    def outstanding(self) -> Counter:
        return self.handed - self.released

    @contextmanager
    def thread_scope(self) -> Iterator[None]:
        self.thread_scopes += 1
        yield

    def attach_or_create(self) -> Any:
        self.attach_calls += 1
        if self.fail_attach:
            raise ProviderInitError("Outlook.Application unavailable")
        return self._hand_out(FakeApplication())

    def get_namespace(self, application: Any) -> Any:
        return self._hand_out(self.root)

    def get_default_folder(self, namespace: Any, folder_id: int) -> Any:
        self.default_folder_calls.append(folder_id)
        return self._hand_out(self.inbox)

    def folder_count(self, parent: FakeFolder) -> int:
        return len(parent.children)

    def folder_at(self, parent: FakeFolder, index: int) -> FakeFolder:
        return self._hand_out(parent.children[index])

    def folder_name(self, folder: FakeFolder) -> str:
        self.names_read.append(folder.name)
        return folder.name

    def restrict_unread(self, folder: FakeFolder) -> FakeCollection:
        return self._hand_out(FakeCollection([item for item in folder.items if item.unread]))

    def item_count(self, items: FakeCollection) -> int:
        return len(items.items)

    def item_at(self, items: FakeCollection, index: int) -> FakeItem:
        return self._hand_out(items.items[index])

    def entry_id(self, item: FakeItem) -> str:
        if item.broken_entry_id:
            raise ItemReadError("EntryID unavailable")
        return item.entry_id

    def read_item(self, item: FakeItem) -> MailItem:
        if item.broken_fields:
            raise ItemReadError("Body unavailable")
        return MailItem(
            entry_id=item.entry_id,
            sender_name=item.sender_name,
            sender_email=item.sender_email,
            subject=item.subject,
            body=item.body,
        )

    def release(self, handle: Any) -> None:
        self.released[handle] += 1


class FakeProcess:
    def __init__(self, running: bool = True, launch_error: Optional[OSError] = None) -> None:
        self.running = running
        self.launch_error = launch_error
        self.launches = 0
        self.kills = 0

    def is_running(self) -> bool:
        return self.running

    def launch(self) -> None:
        self.launches += 1
        if self.launch_error is not None:
            raise self.launch_error
        self.running = True

    def kill_all(self) -> int:
        self.kills += 1
        killed = 1 if self.running else 0
        self.running = False
        return killed


class FakeNotifier:
    """Records deliveries; fails with the queued HTTP statuses first."""

    def __init__(self, failures: Iterable[int] = ()) -> None:
        self.sent: list[tuple[str, str]] = []
        self.attempts = 0
        self._failures = list(failures)

    def send(self, text: str, chat_id: str) -> None:
        self.attempts += 1
        if self._failures:
            status = self._failures.pop(0)
            raise DeliveryError(f"Bot API error {status}", status=status, body='{"ok":false}')
        self.sent.append((chat_id, text))
