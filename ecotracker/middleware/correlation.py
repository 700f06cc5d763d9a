"""Correlation ID middleware.

Tags every HTTP request and WebSocket session with an id that is echoed
back in the X-Correlation-ID response header and attached to every log
record emitted while the request is handled.

Pure ASGI rather than BaseHTTPMiddleware so that WebSocket scopes and
asyncpg connections are left untouched.
"""

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ecotracker.logging_config import correlation_id_ctx, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Incoming ids longer than this are replaced with a fresh one
_MAX_CORRELATION_ID_LENGTH = 128


def _incoming_correlation_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"x-correlation-id":
            candidate = value.decode("latin-1").strip()
            if candidate and len(candidate) <= _MAX_CORRELATION_ID_LENGTH:
                return candidate
    return None


class CorrelationIdMiddleware:
    """Assigns a correlation id per request and logs request timing."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        correlation_id = _incoming_correlation_id(scope) or str(uuid.uuid4())
        token = correlation_id_ctx.set(correlation_id)

        is_websocket = scope["type"] == "websocket"
        method = "WS" if is_websocket else scope.get("method", "")
        path = scope.get("path", "")
        start_time = time.perf_counter()
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code

            if message["type"] == "http.response.start":
                status_code = message.get("status")
                headers = list(message.get("headers", []))
                headers.append(
                    (CORRELATION_ID_HEADER.lower().encode(), correlation_id.encode())
                )
                message = {**message, "headers": headers}

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
            )
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "Request failed",
                method=method,
                path=path,
                duration_ms=round(duration_ms, 2),
            )
            raise
        finally:
            correlation_id_ctx.reset(token)
