"""Exceptions shared by the core and the adapters."""

from __future__ import annotations

from typing import Optional


class NotifierError(Exception):
    """Base class for all recoverable notifier errors."""


class ConfigError(NotifierError):
    """Raised when config.json is missing, malformed or invalid."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class ProviderError(NotifierError):
    """The mail provider could not be used for this cycle."""


class ProviderLaunchError(ProviderError):
    """The provider process was not running and could not be started."""


class ProviderInitError(ProviderError):
    """Attaching to (or creating) the provider application failed."""


class CycleCancelled(ProviderError):
    """The stop signal fired while the cycle was preparing the provider."""


class FolderNotFoundError(NotifierError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Folder '{name}' not found")
        self.name = name


class ItemReadError(NotifierError):
    """A field of a mail item could not be read."""


class DeliveryError(NotifierError):
    """The notification sink rejected the message or could not be reached."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body
