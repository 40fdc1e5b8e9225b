"""Request Logging Middleware"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger("postdesk.requests")


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One log line per request; 4xx/5xx responses log at warning level."""

    def __init__(self, app, skip_paths: tuple[str, ...] = ("/health",)):
        super().__init__(app)
        self.skip_paths = skip_paths

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        path = request.url.path
        if path in self.skip_paths:
            return response

        duration_ms = (time.perf_counter() - start_time) * 1000
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"{get_client_ip(request)} {request.method} {path} "
            f"status={response.status_code} duration_ms={duration_ms:.2f}",
        )
        return response
