"""Liveness endpoint and single-instance check.

The HTTP listener doubles as a lock: a second copy of the notifier finds the
port taken and refuses to start.
"""

from __future__ import annotations

import logging
import socket
import threading

import uvicorn
from fastapi import FastAPI

LOGGER = logging.getLogger(__name__)

SERVICE_NAME = "OTN"


def create_app() -> FastAPI:
    app = FastAPI(title="Outlook Telegram Notifier", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/")
    async def health() -> dict[str, str]:
        return {"service": SERVICE_NAME, "status": "UP"}

    return app


def is_port_in_use(ip: str, port: int, timeout: float = 0.5) -> bool:
    """Return True if something already accepts connections on ip:port."""

    host = "127.0.0.1" if ip == "0.0.0.0" else ip
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError:
        return False
    return True


def start_health_server(ip: str, port: int) -> threading.Thread:
    """Serve the health app on a daemon thread.

    Off the main thread uvicorn leaves signal handling to the application.
    """

    config = uvicorn.Config(create_app(), host=ip, port=port, log_level="warning", log_config=None)
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, name="health-server", daemon=True)
    thread.start()
    LOGGER.info("Health endpoint listening on http://%s:%s/", ip, port)
    return thread
