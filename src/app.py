"""Application entry point for the Outlook Telegram notifier."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import threading
from functools import partial
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.health_server import is_port_in_use, start_health_server
from adapters.notification_formatting import format_message
from adapters.outlook_com import OutlookMailbox, OutlookProcess
from adapters.telegram_bot_notifier import TelegramBotNotifier, check_bot_access
from core.config import AppConfig
from core.errors import ConfigError, DeliveryError
from core.processor import CycleProcessor
from core.scheduler import CycleScheduler
from core.session import SessionManager

NAME = "OTN"
FONT = "tarty-1"
VERSION = "1.5.0"

EXIT_CONFIG_ERROR = 2
EXIT_ALREADY_RUNNING = 3

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: AppConfig) -> list[str]:
    # The token is part of every Bot API URL, so it is always masked.
    values = [config.telegram.bot_token]
    redact_cfg = (config.logging or {}).get("redact", {})
    if redact_cfg.get("enabled", False):
        for name in redact_cfg.get("patterns", []):
            value = os.getenv(name)
            if value:
                values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _resolve_path(path: str) -> str:
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return path


def _configure_logging(config: AppConfig) -> None:
    log_cfg = config.logging or {}
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    enabled = log_cfg.get("enabled", True)
    handlers: list[logging.Handler] = []

    if enabled and log_cfg.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = log_cfg.get("file", {})
    if enabled and file_cfg.get("enabled", False):
        path = _resolve_path(file_cfg.get("path", "logs/otn.log"))
        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # Crashes and delivery failures are also kept apart from the chatty main log.
    error_cfg = log_cfg.get("error_file", {})
    if error_cfg.get("enabled", True):
        error_handler = logging.FileHandler(_resolve_path(error_cfg.get("path", "logs/error.log")), encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        handlers.append(error_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _install_signal_handlers(stop_event: threading.Event) -> None:
    logger = logging.getLogger(__name__)

    def _handle(signum, frame) -> None:
        stop_event.set()
        logger.error("Received system signal: %s", signal.Signals(signum).name)
        # Flush only; logging.shutdown() may block on a handler lock this thread holds.
        for handler in logging.getLogger().handlers:
            handler.flush()
        # A cycle may be stuck inside a COM call; do not wait for its thread.
        os._exit(1)

    for name in ("SIGINT", "SIGTERM", "SIGABRT"):
        sig = getattr(signal, name, None)
        if sig is not None:
            signal.signal(sig, _handle)


def _load(config_path: str) -> Optional[AppConfig]:
    try:
        config = settings.load_config(config_path)
    except ConfigError as exc:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
        for error in exc.errors:
            logging.getLogger(__name__).error("Config error: %s", error)
        return None
    return config


def _check_bot(config: AppConfig) -> bool:
    try:
        check_bot_access(config.telegram.bot_token)
    except DeliveryError as exc:
        logging.getLogger(__name__).error("No access to the Telegram bot: %s", exc)
        return False
    return True


def build_scheduler(config: AppConfig, stop_event: threading.Event) -> CycleScheduler:
    """Wire adapters into the core pipeline."""

    mailbox = OutlookMailbox()
    process = OutlookProcess(config.provider.process_name, config.provider.install_paths)
    sessions = SessionManager(mailbox, process, config.provider, stop_event)
    notifier = TelegramBotNotifier(config.telegram.bot_token)
    formatter = partial(format_message, use_emojis=config.telegram.use_emojis, cut_text=config.cut_text)
    processor = CycleProcessor(
        config=config,
        sessions=sessions,
        mailbox=mailbox,
        notifier=notifier,
        formatter=formatter,
        stop_event=stop_event,
    )
    return CycleScheduler(processor.run_cycle, config.effective_interval())


def _run(config_path: str) -> int:
    _print_banner()
    config = _load(config_path)
    if config is None:
        return EXIT_CONFIG_ERROR

    _configure_logging(config)
    logger = logging.getLogger(__name__)
    logger.info("Starting Outlook Telegram Notifier %s", VERSION)

    if not _check_bot(config):
        return EXIT_CONFIG_ERROR

    # The health port doubles as the single-instance lock.
    if is_port_in_use(config.ip, config.port):
        logger.error("Another instance is already listening on %s", config.listen_address)
        return EXIT_ALREADY_RUNNING
    start_health_server(config.ip, config.port)

    stop_event = threading.Event()
    _install_signal_handlers(stop_event)
    scheduler = build_scheduler(config, stop_event)
    logger.info("%s folder rule(s) loaded", len(config.folders))

    try:
        asyncio.run(scheduler.run_forever())
    finally:
        stop_event.set()
    return 0


def _check(config_path: str) -> int:
    config = _load(config_path)
    if config is None:
        return EXIT_CONFIG_ERROR
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    if not _check_bot(config):
        return EXIT_CONFIG_ERROR

    print(f"Config OK, polling every {config.effective_interval()}s")
    for index, rule in enumerate(config.folders, start=1):
        length = "no body" if rule.message_length == 0 else (
            "full body" if rule.message_length < 0 else f"{rule.message_length} chars"
        )
        print(f"{index}. {rule.name} -> chat {config.chat_for(rule)} ({length})")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="otn")
    parser.add_argument("--config", default=settings.CONFIG_PATH, help="Path to config.json")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the poller")
    subparsers.add_parser("check", help="Validate config.json and bot access, then exit")

    args = parser.parse_args(argv)
    if args.command == "check":
        raise SystemExit(_check(args.config))
    raise SystemExit(_run(args.config))


if __name__ == "__main__":
    main()
