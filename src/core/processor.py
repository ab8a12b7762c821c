"""Core poll cycle.

This module is integration-agnostic. It only relies on ports for the mail
provider and the notification sink. One call to ``run_cycle`` performs:

1) Stop check and a short pre-acquisition delay
2) Session acquisition (with provider launch/recovery)
3) Folder resolution for every configured rule
4) Unread item enumeration per folder
5) Dedup check-and-mark per item
6) Formatting + delivery, rolling the mark back on failure
7) Release of every folder and the session
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import closing
from typing import Any, Callable, Optional

from core.config import AppConfig, FolderRule
from core.dedup import DedupCache
from core.errors import CycleCancelled, DeliveryError, FolderNotFoundError, ItemReadError, ProviderError
from core.folders import iter_unread, resolve_folder
from core.models import CycleReport, MailboxSession, MailItem, Notification
from core.ports import MailboxPort, NotifierPort
from core.session import SessionManager

LOGGER = logging.getLogger(__name__)

# (folder, sender, subject, body, max_length) -> notification text
Formatter = Callable[[str, str, str, str, int], str]


class CycleProcessor:
    """Orchestrates session, folders, dedup, formatting and delivery."""

    def __init__(
        self,
        config: AppConfig,
        sessions: SessionManager,
        mailbox: MailboxPort,
        notifier: NotifierPort,
        formatter: Formatter,
        stop_event: threading.Event,
        dedup: Optional[DedupCache] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._sessions = sessions
        self._mailbox = mailbox
        self._notifier = notifier
        self._formatter = formatter
        self._stop = stop_event
        self._sleep = sleep
        self.dedup = dedup if dedup is not None else DedupCache()

    def run_cycle(self) -> Optional[CycleReport]:
        """Run one poll cycle; returns None when no session was obtained."""

        if self._stop.is_set():
            LOGGER.info("Shutdown requested, skipping poll cycle")
            return None

        self._sleep(self._config.provider.pre_acquire_delay_seconds)

        with self._mailbox.thread_scope():
            session: Optional[MailboxSession] = None
            try:
                try:
                    session = self._sessions.acquire()
                except CycleCancelled as exc:
                    LOGGER.info("%s", exc)
                    return None
                except ProviderError as exc:
                    LOGGER.error("Mail provider unavailable: %s", exc)
                    return None
                return self._process_session(session)
            finally:
                self._sessions.release(session)

    def _process_session(self, session: MailboxSession) -> CycleReport:
        report = CycleReport()
        resolved: list[tuple[FolderRule, Any]] = []
        try:
            for rule in self._config.folders:
                try:
                    folder = resolve_folder(self._mailbox, session.namespace, rule.name)
                except FolderNotFoundError as exc:
                    report.folders_missing += 1
                    LOGGER.warning("Folder lookup failed for '%s': %s", rule.name, exc)
                    continue
                resolved.append((rule, folder))
            report.folders_resolved = len(resolved)

            if not resolved:
                LOGGER.warning("None of the %s configured folders were found", len(self._config.folders))
                return report

            for rule, folder in resolved:
                with closing(iter_unread(self._mailbox, folder)) as items:
                    for item in items:
                        report.items_seen += 1
                        self._process_item(rule, item, report)
        finally:
            for _, folder in resolved:
                self._mailbox.release(folder)

        if report.sent or report.failed:
            LOGGER.info(
                "Cycle complete: folders=%s, unread=%s, sent=%s, failed=%s, duplicates=%s",
                report.folders_resolved,
                report.items_seen,
                report.sent,
                report.failed,
                report.duplicates,
            )
        return report

    def _process_item(self, rule: FolderRule, item: Any, report: CycleReport) -> None:
        try:
            entry_id = self._mailbox.entry_id(item)
        except ItemReadError as exc:
            report.failed += 1
            LOGGER.warning("Skipping item in '%s', EntryID unreadable: %s", rule.name, exc)
            return

        if not self.dedup.mark_if_absent(entry_id):
            report.duplicates += 1
            return

        delivered = False
        try:
            mail = self._mailbox.read_item(item)
            notification = self.build_notification(rule, mail)
            self._notifier.send(notification.text, notification.chat_id)
            delivered = True
        except ItemReadError as exc:
            report.failed += 1
            LOGGER.warning("Skipping item %s in '%s': %s", entry_id, rule.name, exc)
        except DeliveryError as exc:
            report.failed += 1
            LOGGER.error("Telegram delivery failed for '%s' in '%s': %s", mail.subject, rule.name, exc)
        finally:
            if not delivered:
                # Leave the item eligible for the next cycle.
                self.dedup.rollback(entry_id)

        if delivered:
            report.sent += 1
            LOGGER.info("Notification sent to chat %s: %s", notification.chat_id, mail.subject)

    def build_notification(self, rule: FolderRule, mail: MailItem) -> Notification:
        text = self._formatter(rule.name, mail.sender, mail.subject, mail.body, rule.message_length)
        return Notification(chat_id=self._config.chat_for(rule), text=text)
