"""Configuration loading for the notifier.

All user-editable settings (bot, folders, polling, logging) live in a single
JSON file next to the project; the bot token may instead come from the
environment (BOT_TOKEN, loaded from .env) to keep it out of the file.
"""

from __future__ import annotations

import json
import os
from typing import Any

from dotenv import load_dotenv

from core.config import (
    DEFAULT_INSTALL_PATHS,
    DEFAULT_PROCESS_NAME,
    AppConfig,
    FolderRule,
    ProviderConfig,
    TelegramConfig,
)
from core.errors import ConfigError
from validators import validate_config

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config(path: str) -> dict[str, Any]:
    if not os.path.exists(path):
        raise ConfigError([f"Config file not found: {path}"])

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        raise ConfigError([f"Failed to parse {path}: {exc}"]) from exc
    if not isinstance(data, dict):
        raise ConfigError([f"{path} must contain a JSON object"])
    return data


def _chat_id(value: Any) -> str:
    # Numeric ids are accepted unquoted in the JSON file.
    if value is None:
        return ""
    return str(value)


def _build_provider(raw: dict[str, Any]) -> ProviderConfig:
    return ProviderConfig(
        process_name=raw.get("process_name", DEFAULT_PROCESS_NAME),
        install_paths=tuple(raw.get("install_paths", DEFAULT_INSTALL_PATHS)),
        settle_seconds=float(raw.get("settle_seconds", 45)),
        pre_acquire_delay_seconds=float(raw.get("pre_acquire_delay_seconds", 1)),
    )


def build_config(raw: dict[str, Any]) -> AppConfig:
    """Validate a raw config dict and convert it into AppConfig."""

    errors = validate_config(raw)
    if errors:
        raise ConfigError(errors)

    telegram = raw["telegram"]
    folders = tuple(
        FolderRule(
            name=entry["name"],
            chat_id=_chat_id(entry.get("chat_id")),
            message_length=int(entry.get("message_length", 0)),
        )
        for entry in raw["folders"]
    )
    return AppConfig(
        telegram=TelegramConfig(
            bot_token=telegram["bot_token"],
            default_chat_id=_chat_id(telegram.get("default_chat_id")),
            use_emojis=bool(telegram.get("use_emojis", False)),
        ),
        folders=folders,
        check_interval_seconds=int(raw.get("check_interval_seconds", 10)),
        cut_text=raw.get("cut_text", ""),
        ip=raw.get("ip", "127.0.0.1"),
        port=int(raw.get("port", 8080)),
        provider=_build_provider(raw.get("provider") or {}),
        logging=raw.get("logging") or {},
    )


def load_config(path: str = CONFIG_PATH) -> AppConfig:
    """Load config.json, apply environment overrides and validate it."""

    load_dotenv()
    raw = _load_json_config(path)

    token = os.getenv("BOT_TOKEN")
    if token:
        raw.setdefault("telegram", {})
        if isinstance(raw["telegram"], dict):
            raw["telegram"]["bot_token"] = token

    return build_config(raw)
