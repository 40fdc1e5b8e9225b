"""
Admin sessions for Postdesk.
Signed session tokens plus change notifications for views that depend on them.
"""

import logging
import os
import secrets
import time
import warnings
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

logger = logging.getLogger(__name__)

SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days in seconds

# Security: Get secret key from environment
# In production, this MUST be set via environment variable
SECRET_KEY = os.getenv("POSTDESK_SECRET_KEY")
IS_PRODUCTION = os.getenv("POSTDESK_ENV") == "production"

if not SECRET_KEY:
    if IS_PRODUCTION:
        raise RuntimeError("POSTDESK_SECRET_KEY must be set in production environment")
    # Only allow fallback in development
    warnings.warn("POSTDESK_SECRET_KEY not set - using random key (sessions won't persist across restarts)")
    SECRET_KEY = secrets.token_hex(32)


@dataclass(frozen=True)
class Session:
    """An authenticated admin session."""
    session_id: str
    created_at: datetime


SessionCallback = Callable[[str, Optional[Session]], None]


class Subscription:
    """Handle returned by subscribe(); releasing it twice is harmless."""

    def __init__(self, broker: "SessionBroker", callback: SessionCallback):
        self._broker = broker
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._broker._remove(self._callback)
            self.active = False


class SessionBroker:
    """Issues, verifies and revokes session tokens.

    Revoking a session notifies every subscriber with (session_id, None).
    """

    def __init__(self, secret_key: str, max_age: int = SESSION_MAX_AGE):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt="postdesk-session")
        # session id -> revocation time; tokens cannot outlive max_age past it
        self._revoked: dict[str, float] = {}
        self._subscribers: list[SessionCallback] = []

    def issue(self) -> str:
        """Create a signed session token."""
        data = {
            "sid": secrets.token_urlsafe(16),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        return self._serializer.dumps(data)

    def resolve(self, token: Optional[str]) -> Optional[Session]:
        """Return the session behind a token, or None when invalid, expired or revoked."""
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except (BadSignature, SignatureExpired):
            return None
        sid = data.get("sid")
        if not sid or sid in self._revoked:
            return None
        return Session(session_id=sid, created_at=datetime.fromisoformat(data["created_at"]))

    def revoke(self, token: Optional[str]) -> None:
        """End the session behind a token and notify subscribers."""
        session = self.resolve(token)
        if session is None:
            return
        now = time.time()
        self._prune(now)
        self._revoked[session.session_id] = now
        logger.info(f"Session {session.session_id[:8]} revoked")
        self._publish(session.session_id, None)

    def _prune(self, now: float) -> None:
        cutoff = now - self.max_age
        for sid, revoked_at in list(self._revoked.items()):
            if revoked_at < cutoff:
                del self._revoked[sid]

    def subscribe(self, callback: SessionCallback) -> Subscription:
        self._subscribers.append(callback)
        return Subscription(self, callback)

    def _remove(self, callback: SessionCallback) -> None:
        self._subscribers.remove(callback)

    def _publish(self, session_id: str, session: Optional[Session]) -> None:
        for callback in list(self._subscribers):
            callback(session_id, session)


class RequestAuth:
    """Auth collaborator bound to the token presented by one request."""

    def __init__(self, broker: SessionBroker, token: Optional[str]):
        self._broker = broker
        self._token = token

    def get_current_session(self) -> Optional[Session]:
        return self._broker.resolve(self._token)

    def on_session_change(self, callback: Callable[[Optional[Session]], None]) -> Subscription:
        """Call `callback` whenever the session behind this request's token changes."""
        current = self.get_current_session()
        watched = current.session_id if current else None

        def relay(session_id: str, session: Optional[Session]) -> None:
            if session_id == watched:
                callback(session)

        return self._broker.subscribe(relay)
