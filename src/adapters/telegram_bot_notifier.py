"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so notifications can be routed to any chat
the bot is a member of.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any

from core.errors import DeliveryError

LOGGER = logging.getLogger(__name__)

API_BASE = "https://api.telegram.org"
HTTP_TIMEOUT = 10


class TelegramBotNotifier:
    """Notifier adapter that sends messages via the Telegram Bot API."""

    def __init__(self, bot_token: str, api_base: str = API_BASE, timeout: float = HTTP_TIMEOUT) -> None:
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _endpoint(self, method: str) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"{self._api_base}/bot{self._bot_token}/{method}"

    def send(self, text: str, chat_id: str) -> None:
        """Send one HTML message; raises DeliveryError on any failure."""

        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
        }
        self._post_json("sendMessage", payload)
        LOGGER.debug("Bot API accepted message for chat %s", chat_id)

    def _post_json(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(method), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        # A blocking call is fine here: cycles already run on a worker thread.
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                status = response.status
                body = response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise DeliveryError(f"Bot API error {e.code}: {body}", status=e.code, body=body) from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise DeliveryError(f"Bot API request failed: {e}") from e

        if status != 200:
            raise DeliveryError(f"Bot API error {status}: {body}", status=status, body=body)
        try:
            return json.loads(body)
        except ValueError as e:
            raise DeliveryError(f"Bot API returned malformed JSON: {body[:200]}", status=status, body=body) from e


def check_bot_access(bot_token: str, api_base: str = API_BASE, timeout: float = HTTP_TIMEOUT) -> None:
    """Call getMe and raise DeliveryError unless the bot answers ``ok: true``."""

    url = f"{api_base.rstrip('/')}/bot{bot_token}/getMe"
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        raise DeliveryError(f"getMe returned {e.code}", status=e.code) from e
    except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
        raise DeliveryError(f"getMe request failed: {e}") from e

    try:
        result = json.loads(body)
    except ValueError as e:
        raise DeliveryError("getMe returned malformed JSON", body=body) from e
    if not isinstance(result, dict) or result.get("ok") is not True:
        raise DeliveryError("Bot is not available", body=body)
