"""
Admin authentication routes for Postdesk.
Simple password-based auth with secure session cookies.
"""

import logging
import os
import secrets
from typing import Optional
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Request, Form, HTTPException
from fastapi.responses import RedirectResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from postdesk.routes.pages import pending_toasts, render
from postdesk.services.navigation import ADMIN_PATH, HOME_PATH
from postdesk.services.sessions import (
    IS_PRODUCTION,
    SECRET_KEY,
    SESSION_MAX_AGE,
    RequestAuth,
    SessionBroker,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["auth"])

# Session configuration
SESSION_COOKIE_NAME = "postdesk_session"
CSRF_COOKIE_NAME = "postdesk_csrf_token"
LOGIN_RATE_LIMIT = os.getenv("POSTDESK_LOGIN_RATE_LIMIT", "5/minute")

# Rate limiter for login attempts
limiter = Limiter(key_func=get_remote_address)

sessions = SessionBroker(SECRET_KEY, max_age=SESSION_MAX_AGE)


def get_sessions() -> SessionBroker:
    return sessions


def get_request_auth(request: Request, broker: SessionBroker = Depends(get_sessions)) -> RequestAuth:
    """Auth collaborator for the session cookie on this request."""
    return RequestAuth(broker, request.cookies.get(SESSION_COOKIE_NAME))


def get_admin_password() -> str:
    """Get admin password from environment."""
    password = os.getenv("POSTDESK_ADMIN_PASSWORD", "")
    if not password:
        raise ValueError("POSTDESK_ADMIN_PASSWORD environment variable not set")
    return password


def is_safe_redirect_url(url: str) -> bool:
    """Validate that URL is safe for redirect (same-origin only).

    Prevents open redirect attacks by only allowing relative URLs
    that start with / and don't contain protocol or netloc.
    """
    if not url:
        return False
    # Browsers treat "/\host" like "//host"
    if '\\' in url or url[1:2] == '/':
        return False
    parsed = urlparse(url)
    # Only allow relative URLs (no scheme or netloc)
    return not parsed.scheme and not parsed.netloc and url.startswith('/')


def generate_csrf_token() -> str:
    """Generate a CSRF token."""
    return secrets.token_urlsafe(32)


def verify_csrf_token(request: Request, submitted_token: str) -> bool:
    """Verify CSRF token from cookie matches submitted token."""
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME)
    if not cookie_token or not submitted_token:
        return False
    return secrets.compare_digest(cookie_token, submitted_token)


def login_form(request: Request, next: str, error: Optional[str] = None, status_code: int = 200):
    """Render the login page with a fresh CSRF token (double-submit pattern)."""
    csrf_token = generate_csrf_token()
    response = render(
        request,
        "admin/login.html",
        pending_toasts(request),
        status_code=status_code,
        error=error,
        next=next,
        csrf_token=csrf_token,
    )
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=csrf_token,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="strict",
        max_age=3600  # 1 hour
    )
    return response


@router.get("/login")
async def login_page(
    request: Request,
    next: str = ADMIN_PATH,
    broker: SessionBroker = Depends(get_sessions),
):
    """Render login page."""
    # Validate redirect URL to prevent open redirect
    if not is_safe_redirect_url(next):
        next = ADMIN_PATH

    # If already logged in, redirect to admin
    if broker.resolve(request.cookies.get(SESSION_COOKIE_NAME)):
        return RedirectResponse(url=next, status_code=302)

    return login_form(request, next)


@router.post("/login")
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    password: str = Form(...),
    next: str = Form(ADMIN_PATH),
    csrf_token: str = Form(...),
    broker: SessionBroker = Depends(get_sessions),
):
    """Process login form."""
    if not verify_csrf_token(request, csrf_token):
        logger.warning("Login rejected: invalid CSRF token")
        raise HTTPException(status_code=403, detail="Invalid CSRF token")

    if not is_safe_redirect_url(next):
        next = ADMIN_PATH

    try:
        admin_password = get_admin_password()
    except ValueError:
        logger.error("Login attempted but POSTDESK_ADMIN_PASSWORD is not set")
        # Generic error to avoid info disclosure
        raise HTTPException(status_code=401, detail="Invalid credentials")

    # Check password (constant-time comparison)
    if not secrets.compare_digest(password, admin_password):
        logger.warning("Login rejected: invalid password")
        return login_form(request, next, error="Invalid password", status_code=401)

    response = RedirectResponse(url=next, status_code=302)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=broker.issue(),
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        max_age=SESSION_MAX_AGE
    )

    # Clear CSRF cookie after successful login
    response.delete_cookie(key=CSRF_COOKIE_NAME)
    logger.info("Admin logged in")

    return response


@router.get("/logout")
async def logout(request: Request, broker: SessionBroker = Depends(get_sessions)):
    """Revoke the session, clear the cookie and return home."""
    broker.revoke(request.cookies.get(SESSION_COOKIE_NAME))
    response = RedirectResponse(url=HOME_PATH, status_code=302)
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax"
    )
    return response
