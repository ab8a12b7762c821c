from __future__ import annotations

import pytest

from core.errors import FolderNotFoundError
from core.folders import INBOX_FOLDER_NAME, OL_FOLDER_INBOX, iter_unread, resolve_folder
from fakes import FakeFolder, FakeItem, FakeMailbox


def _tree() -> FakeMailbox:
    invoices = FakeFolder("Invoices")
    archive = FakeFolder("Archive", children=[FakeFolder("2023"), invoices])
    mailbox_root = FakeFolder("alice@example.com", children=[FakeFolder("Drafts"), archive])
    return FakeMailbox(folders=[mailbox_root, FakeFolder("Public Folders")])


def test_inbox_uses_default_folder_without_search() -> None:
    mailbox = _tree()
    folder = resolve_folder(mailbox, mailbox.root, INBOX_FOLDER_NAME)
    assert folder is mailbox.inbox
    assert mailbox.default_folder_calls == [OL_FOLDER_INBOX]
    assert mailbox.names_read == []


def test_nested_folder_is_found_and_intermediates_released() -> None:
    mailbox = _tree()
    folder = resolve_folder(mailbox, mailbox.root, "Invoices")
    assert folder.name == "Invoices"
    # Only the returned handle stays with the caller.
    assert list(mailbox.outstanding().elements()) == [folder]


def test_search_is_depth_first_in_provider_order() -> None:
    mailbox = _tree()
    resolve_folder(mailbox, mailbox.root, "Invoices")
    assert mailbox.names_read == ["alice@example.com", "Drafts", "Archive", "2023", "Invoices"]


def test_first_match_in_depth_first_order_wins() -> None:
    nested = FakeFolder("Reports")
    top_level = FakeFolder("Reports")
    mailbox = FakeMailbox(folders=[FakeFolder("Team", children=[nested]), top_level])
    assert resolve_folder(mailbox, mailbox.root, "Reports") is nested


def test_match_is_case_sensitive() -> None:
    mailbox = _tree()
    with pytest.raises(FolderNotFoundError) as excinfo:
        resolve_folder(mailbox, mailbox.root, "invoices")
    assert excinfo.value.name == "invoices"
    assert not mailbox.outstanding()


def test_iter_unread_yields_unread_items_in_order() -> None:
    items = [FakeItem("1"), FakeItem("2", unread=False), FakeItem("3")]
    mailbox = FakeMailbox()
    folder = FakeFolder("Inbox", items=items)
    assert [item.entry_id for item in iter_unread(mailbox, folder)] == ["1", "3"]
    assert not mailbox.outstanding()


def test_iter_unread_with_nothing_unread_releases_collection() -> None:
    mailbox = FakeMailbox()
    folder = FakeFolder("Inbox", items=[FakeItem("1", unread=False)])
    assert list(iter_unread(mailbox, folder)) == []
    assert sum(mailbox.handed.values()) == 1
    assert not mailbox.outstanding()


def test_iter_unread_releases_when_closed_early() -> None:
    mailbox = FakeMailbox()
    folder = FakeFolder("Inbox", items=[FakeItem("1"), FakeItem("2")])
    generator = iter_unread(mailbox, folder)
    next(generator)
    generator.close()
    assert not mailbox.outstanding()
