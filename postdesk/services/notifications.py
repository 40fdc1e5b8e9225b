"""
Toast notifications for the admin views.
Toasts raised during a request are either rendered directly or carried
across one redirect in a signed flash cookie.
"""

import logging
from dataclasses import dataclass, asdict

from itsdangerous import URLSafeSerializer, BadSignature

logger = logging.getLogger(__name__)

FLASH_COOKIE_NAME = "postdesk_flash"

LEVELS = ("success", "warning", "error")


@dataclass(frozen=True)
class Toast:
    level: str
    message: str


class Notifier:
    """Collects toasts for the current request and logs each one."""

    def __init__(self, toasts: list[Toast] | None = None):
        self.toasts: list[Toast] = list(toasts or [])

    def _push(self, level: str, message: str) -> None:
        self.toasts.append(Toast(level=level, message=message))

    def success(self, message: str) -> None:
        logger.info(message)
        self._push("success", message)

    def warning(self, message: str) -> None:
        logger.warning(message)
        self._push("warning", message)

    def error(self, message: str) -> None:
        logger.error(message)
        self._push("error", message)


class FlashCookie:
    """Signs toasts into a cookie value and reads them back."""

    def __init__(self, secret_key: str):
        self._serializer = URLSafeSerializer(secret_key, salt="postdesk-flash")

    def dumps(self, toasts: list[Toast]) -> str:
        return self._serializer.dumps([asdict(t) for t in toasts])

    def loads(self, value: str | None) -> list[Toast]:
        if not value:
            return []
        try:
            data = self._serializer.loads(value)
        except BadSignature:
            logger.warning("Discarding flash cookie with bad signature")
            return []
        return [
            Toast(level=item["level"], message=item["message"])
            for item in data
            if item.get("level") in LEVELS
        ]
