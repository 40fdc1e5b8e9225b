"""
Admin dashboard view: post list, create form, delete and edit routing.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from postdesk.errors import PostdeskError
from postdesk.services.navigation import edit_path
from postdesk.views.base import View, ViewContext
from postdesk.views.forms import FormMode, PostFormController

logger = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = "No blog posts found. Create your first post!"
DELETE_PROMPT = "Are you sure you want to delete this post?"


def format_date(value: datetime) -> str:
    return value.strftime("%b %d, %Y")


@dataclass(frozen=True)
class PostCard:
    """Summary of one post as shown in the admin list."""
    id: str
    title: str
    created: str
    status: str
    preview: str

    @classmethod
    def from_post(cls, post) -> "PostCard":
        return cls(
            id=post.id,
            title=post.title,
            created=format_date(post.created_at),
            status="Published" if post.published else "Draft",
            preview=post.preview,
        )


class AdminOrchestrator(View):
    """Owns the displayed post list and the create form."""

    def __init__(self, context: ViewContext):
        super().__init__(context)
        self.posts = []
        self.form = PostFormController(
            context.store,
            context.notifier,
            context.navigator,
            mode=FormMode.CREATE,
            on_post_created=self.fetch_posts,
        )

    async def load(self) -> None:
        await self.fetch_posts()

    def teardown(self) -> None:
        self.form.mounted = False
        super().teardown()

    @property
    def cards(self) -> list[PostCard]:
        return [PostCard.from_post(post) for post in self.posts]

    @property
    def placeholder(self) -> str | None:
        return EMPTY_PLACEHOLDER if not self.posts else None

    async def fetch_posts(self) -> None:
        """Replace the list with a fresh fetch; keep the old one on failure."""
        try:
            posts = await self.context.store.list_posts()
        except PostdeskError:
            logger.error("Error fetching posts", exc_info=True)
            if self.active:
                self.context.notifier.error("Failed to load blog posts")
            return
        if self.active:
            self.posts = posts

    async def delete_post(self, post_id: str) -> bool:
        """Delete after confirmation, then re-fetch. Returns True if deleted."""
        if not self.context.confirm(DELETE_PROMPT):
            logger.debug(f"Delete of post {post_id} not confirmed")
            return False
        try:
            await self.context.store.delete_post(post_id)
        except PostdeskError:
            logger.error(f"Error deleting post {post_id}", exc_info=True)
            if self.active:
                self.context.notifier.error("Failed to delete post")
            return False
        if not self.active:
            return True
        self.context.notifier.success("Post deleted successfully")
        await self.fetch_posts()
        return True

    def edit_post(self, post_id: str) -> None:
        self.context.navigator.go_to(edit_path(post_id))
