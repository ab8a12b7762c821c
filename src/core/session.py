"""Mail provider session acquisition and recovery.

The manager owns the escalation path for a wedged provider: when attaching
to Outlook fails, every provider process is killed so the next cycle starts
from a clean state. It never retries within the same cycle.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from core.config import ProviderConfig
from core.errors import CycleCancelled, ProviderInitError, ProviderLaunchError
from core.models import MailboxSession
from core.ports import MailboxPort, ProviderProcessPort

LOGGER = logging.getLogger(__name__)


class SessionManager:
    """Acquire, release and reset mailbox sessions."""

    def __init__(
        self,
        mailbox: MailboxPort,
        process: ProviderProcessPort,
        provider_config: ProviderConfig,
        stop_event: threading.Event,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._mailbox = mailbox
        self._process = process
        self._config = provider_config
        self._stop = stop_event
        self._sleep = sleep

    def acquire(self) -> MailboxSession:
        """Return a live session or raise a ProviderError subclass."""

        if not self._process.is_running():
            LOGGER.info("%s is not running, starting it", self._config.process_name)
            try:
                self._process.launch()
            except OSError as exc:
                raise ProviderLaunchError(f"Failed to start {self._config.process_name}: {exc}") from exc

            if self._stop.is_set():
                raise CycleCancelled("Shutdown requested while the provider was starting")

            # Outlook start-up is not observable over COM; give it time to load profiles.
            self._sleep(self._config.settle_seconds)

        try:
            application = self._mailbox.attach_or_create()
        except ProviderInitError:
            LOGGER.warning("Outlook initialization failed, terminating %s", self._config.process_name)
            self.reset()
            raise

        try:
            namespace = self._mailbox.get_namespace(application)
        except ProviderInitError:
            self._mailbox.release(application)
            self.reset()
            raise
        return MailboxSession(application=application, namespace=namespace)

    def release(self, session: Optional[MailboxSession]) -> None:
        if session is None:
            return
        self._mailbox.release(session.namespace)
        self._mailbox.release(session.application)

    def reset(self) -> int:
        """Kill every provider process; the next cycle relaunches it."""

        killed = self._process.kill_all()
        if killed:
            LOGGER.info("Terminated %s %s process(es), will retry next cycle", killed, self._config.process_name)
        return killed
