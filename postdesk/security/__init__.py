"""Security modules for Postdesk."""

from postdesk.security.headers import SecurityHeadersMiddleware
from postdesk.security.logging import RequestLogMiddleware

__all__ = [
    "SecurityHeadersMiddleware",
    "RequestLogMiddleware",
]
