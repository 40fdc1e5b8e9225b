"""
Shared plumbing for admin views.
A view is activated on entry and torn down on exit; results that arrive
after teardown are dropped.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from postdesk.services.navigation import HOME_PATH, Navigator
from postdesk.services.notifications import Notifier
from postdesk.services.posts import PostStore
from postdesk.services.sessions import RequestAuth, Session, Subscription

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "You must be logged in to access the admin panel"


def decline(message: str) -> bool:
    return False


@dataclass
class ViewContext:
    """Collaborators handed explicitly to each view."""
    store: PostStore
    auth: RequestAuth
    navigator: Navigator = field(default_factory=Navigator)
    notifier: Notifier = field(default_factory=Notifier)
    confirm: Callable[[str], bool] = decline


class View:
    """Base for views that need an admin session."""

    def __init__(self, context: ViewContext):
        self.context = context
        self.session: Optional[Session] = None
        self.active = False
        self._subscription: Optional[Subscription] = None

    async def __aenter__(self):
        await self.activate()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.teardown()

    async def activate(self) -> None:
        self.active = True
        self.session = self.context.auth.get_current_session()
        if self.session is None:
            self.context.navigator.go_to(HOME_PATH)
            self.context.notifier.error(UNAUTHORIZED_MESSAGE)
            return
        self._subscription = self.context.auth.on_session_change(self._session_changed)
        await self.load()

    async def load(self) -> None:
        """Fetch whatever the view shows once a session is confirmed."""

    def teardown(self) -> None:
        self.active = False
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _session_changed(self, session: Optional[Session]) -> None:
        if not self.active:
            return
        self.session = session
        if session is None:
            logger.info("Session ended while view was open, redirecting")
            self.context.navigator.go_to(HOME_PATH)
