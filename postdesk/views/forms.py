"""
Post form controller shared by the create form and the edit view.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from postdesk.errors import NotFound, PostdeskError, ValidationError
from postdesk.services.navigation import ADMIN_PATH, Navigator
from postdesk.services.notifications import Notifier
from postdesk.services.posts import PostFields, PostStore

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "Title and content are required"


class FormMode(enum.Enum):
    CREATE = "create"
    UPDATE = "update"


class FormState(enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    VALIDATION_REJECTED = "validation_rejected"
    STORE_FAILED = "store_failed"


@dataclass
class PostDraft:
    """Editable copy of a post's fields. `id` is only set when editing."""
    title: str = ""
    content: str = ""
    excerpt: str = ""
    published: bool = True
    id: Optional[str] = None

    @classmethod
    def from_post(cls, post) -> "PostDraft":
        return cls(
            title=post.title,
            content=post.content,
            excerpt=post.excerpt or "",
            published=post.published,
            id=post.id,
        )


class PostFormController:
    """Validates a draft and submits it to the store.

    In create mode a successful submit resets the draft and awaits
    `on_post_created`; in update mode it navigates back to the list.
    """

    def __init__(
        self,
        store: PostStore,
        notifier: Notifier,
        navigator: Navigator,
        mode: FormMode = FormMode.CREATE,
        draft: Optional[PostDraft] = None,
        on_post_created: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.navigator = navigator
        self.mode = mode
        self.draft = draft or PostDraft()
        self.on_post_created = on_post_created
        self.state = FormState.IDLE
        self.mounted = True

    @property
    def is_submitting(self) -> bool:
        return self.state is FormState.SUBMITTING

    @property
    def verb(self) -> str:
        return "create" if self.mode is FormMode.CREATE else "update"

    async def submit(self) -> FormState:
        if self.is_submitting:
            logger.debug("Submit ignored, another submit is in flight")
            return FormState.SUBMITTING

        draft = self.draft
        try:
            fields = PostFields.from_input(
                draft.title, draft.content, draft.excerpt, draft.published
            )
        except ValidationError:
            self.notifier.warning(REQUIRED_MESSAGE)
            return FormState.VALIDATION_REJECTED

        self.state = FormState.SUBMITTING
        try:
            if self.mode is FormMode.CREATE:
                await self.store.create_post(fields)
            else:
                await self.store.update_post(draft.id, fields)
        except NotFound:
            if not self.mounted:
                return FormState.STORE_FAILED
            self.notifier.error("Post not found")
            self.navigator.go_to(ADMIN_PATH)
            return FormState.STORE_FAILED
        except PostdeskError:
            logger.error(f"Error during post {self.verb}", exc_info=True)
            if not self.mounted:
                return FormState.STORE_FAILED
            self.notifier.error(f"Failed to {self.verb} post")
            return FormState.STORE_FAILED
        finally:
            self.state = FormState.IDLE

        if not self.mounted:
            return FormState.SUCCESS

        self.notifier.success(f"Post {self.verb}d successfully")
        if self.mode is FormMode.CREATE:
            self.draft = PostDraft()
            if self.on_post_created is not None:
                await self.on_post_created()
        else:
            self.navigator.go_to(ADMIN_PATH)
        return FormState.SUCCESS
