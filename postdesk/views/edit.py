"""Edit view: loads one post by id and drives the form in update mode."""

import logging
from typing import Optional

from postdesk.errors import NotFound, PostdeskError
from postdesk.services.navigation import ADMIN_PATH
from postdesk.services.posts import render_markdown
from postdesk.views.base import View, ViewContext
from postdesk.views.forms import FormMode, PostDraft, PostFormController

logger = logging.getLogger(__name__)


class EditView(View):
    def __init__(self, context: ViewContext, post_id: str):
        super().__init__(context)
        self.post_id = post_id
        self.post = None
        self.form = PostFormController(
            context.store,
            context.notifier,
            context.navigator,
            mode=FormMode.UPDATE,
            draft=PostDraft(id=post_id),
        )

    async def load(self) -> None:
        try:
            post = await self.context.store.get_post(self.post_id)
        except NotFound:
            if self.active:
                self.context.notifier.error("Post not found")
                self.context.navigator.go_to(ADMIN_PATH)
            return
        except PostdeskError:
            logger.error(f"Error fetching post {self.post_id}", exc_info=True)
            if self.active:
                self.context.notifier.error("Failed to load post")
                self.context.navigator.go_to(ADMIN_PATH)
            return
        if self.active:
            self.post = post
            self.form.draft = PostDraft.from_post(post)

    def teardown(self) -> None:
        self.form.mounted = False
        super().teardown()

    def apply(self, title: str, content: str, excerpt: str, published: bool) -> None:
        """Copy submitted form values onto the draft; the id is never taken from input."""
        draft = self.form.draft
        draft.title = title
        draft.content = content
        draft.excerpt = excerpt
        draft.published = published

    @property
    def preview_html(self) -> Optional[str]:
        if not self.form.draft.content:
            return None
        return render_markdown(self.form.draft.content)
