"""Outlook adapters: COM mailbox access and OUTLOOK.EXE process control.

Both classes satisfy the core ports (MailboxPort, ProviderProcessPort) so the
core never touches pywin32 or psutil directly.
"""

from __future__ import annotations

import logging
import os
import subprocess
from contextlib import contextmanager
from typing import Any, Iterable, Iterator

import psutil

from core.config import DEFAULT_INSTALL_PATHS, DEFAULT_PROCESS_NAME
from core.errors import ItemReadError, ProviderInitError
from core.models import MailItem

try:  # Outlook automation is only available on Windows
    import pythoncom
    import pywintypes
    import win32com.client
except ImportError:  # pragma: no cover - handled at runtime
    pythoncom = None  # type: ignore
    pywintypes = None  # type: ignore
    win32com = None  # type: ignore

LOGGER = logging.getLogger(__name__)

OUTLOOK_PROG_ID = "Outlook.Application"
UNREAD_FILTER = "[UnRead] = True"


def _com_errors() -> tuple[type[BaseException], ...]:
    if pywintypes is None:
        return (AttributeError,)
    return (pywintypes.com_error, AttributeError)


class OutlookMailbox:
    """MailboxPort backed by the Outlook object model over COM.

    Collections in the object model are 1-based; the port is 0-based.
    """

    def __init__(self) -> None:
        if win32com is None:
            raise RuntimeError("pywin32 is required to access Outlook. Install it with 'pip install pywin32'.")

    @contextmanager
    def thread_scope(self) -> Iterator[None]:
        # Every cycle runs on a fresh worker thread, which needs its own apartment.
        pythoncom.CoInitialize()
        try:
            yield
        finally:
            pythoncom.CoUninitialize()

    def attach_or_create(self) -> Any:
        try:
            return win32com.client.GetActiveObject(OUTLOOK_PROG_ID)
        except _com_errors():
            LOGGER.info("No active Outlook object, creating a new one")
        try:
            return win32com.client.Dispatch(OUTLOOK_PROG_ID)
        except _com_errors() as exc:
            raise ProviderInitError(f"Failed to create {OUTLOOK_PROG_ID}: {exc}") from exc

    def get_namespace(self, application: Any) -> Any:
        try:
            return application.GetNamespace("MAPI")
        except _com_errors() as exc:
            raise ProviderInitError(f"Failed to open the MAPI namespace: {exc}") from exc

    def get_default_folder(self, namespace: Any, folder_id: int) -> Any:
        return namespace.GetDefaultFolder(folder_id)

    def folder_count(self, parent: Any) -> int:
        return int(parent.Folders.Count)

    def folder_at(self, parent: Any, index: int) -> Any:
        return parent.Folders.Item(index + 1)

    def folder_name(self, folder: Any) -> str:
        return str(folder.Name)

    def restrict_unread(self, folder: Any) -> Any:
        return folder.Items.Restrict(UNREAD_FILTER)

    def item_count(self, items: Any) -> int:
        return int(items.Count)

    def item_at(self, items: Any, index: int) -> Any:
        return items.Item(index + 1)

    def entry_id(self, item: Any) -> str:
        try:
            return str(item.EntryID)
        except _com_errors() as exc:
            raise ItemReadError(f"EntryID: {exc}") from exc

    def read_item(self, item: Any) -> MailItem:
        try:
            return MailItem(
                entry_id=str(item.EntryID),
                sender_name=str(item.SenderName or ""),
                sender_email=str(item.SenderEmailAddress or ""),
                subject=str(item.Subject or ""),
                body=str(item.Body or ""),
            )
        except _com_errors() as exc:
            raise ItemReadError(str(exc)) from exc

    def release(self, handle: Any) -> None:
        """No-op: pywin32 releases the COM reference with the last Python reference."""


class OutlookProcess:
    """ProviderProcessPort for OUTLOOK.EXE based on psutil."""

    def __init__(
        self,
        process_name: str = DEFAULT_PROCESS_NAME,
        install_paths: Iterable[str] = DEFAULT_INSTALL_PATHS,
    ) -> None:
        self._process_name = process_name
        self._install_paths = list(install_paths)

    def _matching(self) -> Iterator[psutil.Process]:
        wanted = self._process_name.lower()
        for proc in psutil.process_iter(["name"]):
            name = proc.info.get("name") or ""
            if name.lower() == wanted:
                yield proc

    def is_running(self) -> bool:
        return any(True for _ in self._matching())

    def launch(self) -> None:
        """Start Outlook from the first known install path, else by name."""

        for path in self._install_paths:
            if os.path.exists(path):
                LOGGER.info("Launching %s", path)
                subprocess.Popen([path])
                return
        LOGGER.info("No known install path found, launching %s from PATH", self._process_name)
        subprocess.Popen([self._process_name])

    def kill_all(self) -> int:
        killed = 0
        for proc in self._matching():
            try:
                proc.kill()
            except psutil.Error as exc:
                LOGGER.warning("Failed to terminate %s (PID %s): %s", self._process_name, proc.pid, exc)
                continue
            killed += 1
            LOGGER.info("Terminated %s (PID %s)", self._process_name, proc.pid)
        return killed
