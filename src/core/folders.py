"""Folder resolution and unread item enumeration (core domain).

Handle ownership follows one rule: a function hands back at most one
handle (the one it returns or yields) and releases every other handle it
obtained before it returns.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from core.errors import FolderNotFoundError
from core.ports import MailboxPort

LOGGER = logging.getLogger(__name__)

# Resolved with GetDefaultFolder instead of a tree walk.
INBOX_FOLDER_NAME = "Inbox"
OL_FOLDER_INBOX = 6


def resolve_folder(mailbox: MailboxPort, namespace: Any, name: str) -> Any:
    """Return the folder handle for ``name`` or raise FolderNotFoundError."""

    if name == INBOX_FOLDER_NAME:
        return mailbox.get_default_folder(namespace, OL_FOLDER_INBOX)

    folder = _find_folder(mailbox, namespace, name)
    if folder is None:
        raise FolderNotFoundError(name)
    return folder


def _find_folder(mailbox: MailboxPort, parent: Any, target: str) -> Optional[Any]:
    """Depth-first search below ``parent``; names compare case-sensitively."""

    count = mailbox.folder_count(parent)
    for index in range(count):
        child = mailbox.folder_at(parent, index)
        if mailbox.folder_name(child) == target:
            return child
        try:
            found = _find_folder(mailbox, child, target)
        finally:
            mailbox.release(child)
        if found is not None:
            return found
    return None


def iter_unread(mailbox: MailboxPort, folder: Any) -> Iterator[Any]:
    """Yield unread item handles in the order the provider returns them.

    Each item is released once the consumer moves past it; the filtered
    collection is released when the generator finishes or is closed.
    """

    items = mailbox.restrict_unread(folder)
    try:
        count = mailbox.item_count(items)
        if count == 0:
            return
        LOGGER.debug("%s unread item(s) in folder", count)
        for index in range(count):
            item = mailbox.item_at(items, index)
            try:
                yield item
            finally:
                mailbox.release(item)
    finally:
        mailbox.release(items)
