"""
Security headers for the Postdesk admin panel.

Headers implemented:
- Strict-Transport-Security (HSTS)
- Content-Security-Policy (CSP)
- X-Content-Type-Options
- X-Frame-Options
- Referrer-Policy
- Permissions-Policy
- Cross-Origin-Opener-Policy (COOP)
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add hardened security headers to all responses."""

    # Admin pages use none of these browser features
    PERMISSIONS_POLICY = ", ".join([
        "camera=()",
        "display-capture=()",
        "geolocation=()",
        "microphone=()",
        "payment=()",
        "usb=()",
    ])

    # Templates are self-contained; inline styles only
    CSP_DIRECTIVES = {
        "default-src": "'self'",
        "style-src": "'self' 'unsafe-inline'",
        "img-src": "'self' data: https:",
        "frame-ancestors": "'none'",
        "base-uri": "'self'",
        "form-action": "'self'",
    }

    def __init__(self, app, csp_overrides: dict | None = None):
        """Initialize with optional CSP directive overrides.

        Args:
            app: The ASGI application
            csp_overrides: Optional dict to override default CSP directives
        """
        super().__init__(app)
        self.csp_directives = {**self.CSP_DIRECTIVES}
        if csp_overrides:
            self.csp_directives.update(csp_overrides)

        self.csp = "; ".join(
            f"{key} {value}".strip() if value else key
            for key, value in self.csp_directives.items()
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
        response.headers["Content-Security-Policy"] = self.csp
        response.headers["Permissions-Policy"] = self.PERMISSIONS_POLICY

        return response
