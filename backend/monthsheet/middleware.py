from __future__ import annotations

import time

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            "{} {} -> {} ({:.1f} ms, client {})",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            self._client_host(request),
        )
        return response

    def _client_host(self, request: Request) -> str:
        if request.client and request.client.host:
            return request.client.host
        return "unknown"
