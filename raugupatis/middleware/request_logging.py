"""Per-request access logging middleware."""
from __future__ import annotations

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("raugupatis.access")


class RequestLoggingMiddleware:
    """Logs method, path, status and duration for every HTTP request."""

    def __init__(self, app: ASGIApp, skip_paths: tuple[str, ...] = ("/health",)):
        self.app = app
        self.skip_paths = skip_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        method = scope.get("method", "")
        started = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if path not in self.skip_paths:
                elapsed_ms = (time.perf_counter() - started) * 1000
                level = logging.WARNING if status_code >= 500 else logging.INFO
                logger.log(level, f"{method} {path} -> {status_code} ({elapsed_ms:.1f} ms)")
