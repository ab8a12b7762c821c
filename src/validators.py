"""Validation helpers for config.json.

Validation collects every problem instead of stopping at the first one so
a broken config can be fixed in one pass.
"""

from __future__ import annotations

import re
from typing import Any

BOT_TOKEN_RE = re.compile(r"^\d+:[\w-]+$")
CHAT_USERNAME_RE = re.compile(r"^@[a-zA-Z0-9_]+$")

ALLOWED_IPS = ("127.0.0.1", "0.0.0.0")
MIN_PORT = 1024
MAX_PORT = 49151
MAX_CHECK_INTERVAL = 1000
MIN_CUT_TEXT = 4
MAX_FOLDER_NAME = 150
MAX_MESSAGE_LENGTH = 4000


def is_valid_bot_token(token: Any) -> bool:
    """Format check only, e.g. "123456789:ABCdefGhIJKlmNoPQRstuVWXyz"."""

    return isinstance(token, str) and bool(BOT_TOKEN_RE.match(token))


def is_valid_chat_id(chat_id: Any) -> bool:
    """Empty, "0", a numeric id ("-1001234567890") or a channel name ("@channel")."""

    if chat_id is None:
        return True
    if isinstance(chat_id, bool):
        return False
    if isinstance(chat_id, int):
        return True
    if not isinstance(chat_id, str):
        return False
    if chat_id in ("", "0") or _is_int(chat_id):
        return True
    return bool(CHAT_USERNAME_RE.match(chat_id))


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def _is_int_value(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_folders(raw_folders: Any, default_chat_id: Any) -> list[str]:
    if not isinstance(raw_folders, list) or not raw_folders:
        return ["folders must be a non-empty list"]

    errors: list[str] = []
    for index, folder in enumerate(raw_folders):
        if not isinstance(folder, dict):
            errors.append(f"folders[{index}] must be an object")
            continue
        name = folder.get("name")
        if not isinstance(name, str) or not 1 <= len(name) <= MAX_FOLDER_NAME:
            errors.append(f"folders[{index}].name must be 1 to {MAX_FOLDER_NAME} characters")
        chat_id = folder.get("chat_id", "")
        if not is_valid_chat_id(chat_id):
            errors.append(f"folders[{index}].chat_id is invalid")
        elif not chat_id and not default_chat_id:
            errors.append(f"folders[{index}] has no chat_id and telegram.default_chat_id is empty")
        length = folder.get("message_length", 0)
        if not _is_int_value(length) or length > MAX_MESSAGE_LENGTH:
            errors.append(f"folders[{index}].message_length must be an integer up to {MAX_MESSAGE_LENGTH}")
    return errors


def _validate_provider(provider: Any) -> list[str]:
    if provider is None:
        return []
    if not isinstance(provider, dict):
        return ["provider must be an object"]

    errors: list[str] = []
    for key in ("settle_seconds", "pre_acquire_delay_seconds"):
        value = provider.get(key, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            errors.append(f"provider.{key} must be a non-negative number")
    name = provider.get("process_name", "OUTLOOK.EXE")
    if not isinstance(name, str) or not name:
        errors.append("provider.process_name must be a non-empty string")
    paths = provider.get("install_paths", [])
    if not isinstance(paths, list) or not all(isinstance(path, str) for path in paths):
        errors.append("provider.install_paths must be a list of strings")
    return errors


def validate_config(raw: dict[str, Any]) -> list[str]:
    """Return a list of human-readable problems; empty when the config is valid."""

    errors: list[str] = []

    telegram = raw.get("telegram")
    if not isinstance(telegram, dict):
        errors.append("telegram section is required")
        telegram = {}
    if not is_valid_bot_token(telegram.get("bot_token")):
        errors.append("telegram.bot_token is invalid")
    default_chat_id = telegram.get("default_chat_id", "")
    if not is_valid_chat_id(default_chat_id):
        errors.append("telegram.default_chat_id is invalid")
    if not isinstance(telegram.get("use_emojis", False), bool):
        errors.append("telegram.use_emojis must be true or false")

    interval = raw.get("check_interval_seconds", 10)
    if not _is_int_value(interval) or not 0 <= interval <= MAX_CHECK_INTERVAL:
        errors.append(f"check_interval_seconds must be between 0 and {MAX_CHECK_INTERVAL}")

    cut_text = raw.get("cut_text", "")
    if not isinstance(cut_text, str) or 0 < len(cut_text) < MIN_CUT_TEXT:
        errors.append(f"cut_text must be empty or at least {MIN_CUT_TEXT} characters")

    errors.extend(_validate_folders(raw.get("folders"), default_chat_id))

    if raw.get("ip", "127.0.0.1") not in ALLOWED_IPS:
        errors.append("ip must be 127.0.0.1 or 0.0.0.0")
    port = raw.get("port", 8080)
    if not _is_int_value(port) or not MIN_PORT <= port <= MAX_PORT:
        errors.append(f"port must be between {MIN_PORT} and {MAX_PORT}")

    errors.extend(_validate_provider(raw.get("provider")))

    if not isinstance(raw.get("logging", {}), dict):
        errors.append("logging must be an object")
    return errors
