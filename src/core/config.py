"""Core configuration dataclasses.

We keep config parsing outside the core (see settings.py), but these
dataclasses define the shape the core expects so adapters and the app layer
can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_CHECK_INTERVAL = 10
DEFAULT_PROCESS_NAME = "OUTLOOK.EXE"
DEFAULT_INSTALL_PATHS = (
    r"C:\Program Files\Microsoft Office\root\Office16\OUTLOOK.EXE",
    r"C:\Program Files (x86)\Microsoft Office\root\Office16\OUTLOOK.EXE",
    r"C:\Program Files\Microsoft Office\Office16\OUTLOOK.EXE",
    r"C:\Program Files (x86)\Microsoft Office\Office16\OUTLOOK.EXE",
)


@dataclass(frozen=True)
class FolderRule:
    """One watched folder.

    message_length: 0 omits the body, a negative value keeps it whole and a
    positive value truncates it to that many characters.
    """

    name: str
    chat_id: str = ""
    message_length: int = 0


@dataclass(frozen=True)
class TelegramConfig:
    bot_token: str
    default_chat_id: str
    use_emojis: bool = False


@dataclass(frozen=True)
class ProviderConfig:
    """How the mail provider process is found, started and waited for."""

    process_name: str = DEFAULT_PROCESS_NAME
    install_paths: tuple[str, ...] = DEFAULT_INSTALL_PATHS
    settle_seconds: float = 45.0
    pre_acquire_delay_seconds: float = 1.0


@dataclass(frozen=True)
class AppConfig:
    """Validated configuration for one run of the notifier."""

    telegram: TelegramConfig
    folders: tuple[FolderRule, ...]
    check_interval_seconds: int = DEFAULT_CHECK_INTERVAL
    cut_text: str = ""
    ip: str = "127.0.0.1"
    port: int = 8080
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    logging: Optional[dict] = None

    @property
    def listen_address(self) -> str:
        return f"{self.ip}:{self.port}"

    def effective_interval(self) -> int:
        """Seconds between cycles; non-positive values fall back to the default."""

        if self.check_interval_seconds <= 0:
            return DEFAULT_CHECK_INTERVAL
        return self.check_interval_seconds

    def chat_for(self, rule: FolderRule) -> str:
        return rule.chat_id or self.telegram.default_chat_id
