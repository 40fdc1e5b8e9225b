"""Tests for PostFormController

Covers the submit state machine shared by the create form and the edit view.
"""

import pytest

from postdesk.errors import StoreError
from postdesk.services.navigation import Navigator
from postdesk.services.notifications import Notifier
from postdesk.views.forms import (
    REQUIRED_MESSAGE,
    FormMode,
    FormState,
    PostDraft,
    PostFormController,
)


def make_controller(store, mode=FormMode.CREATE, draft=None, on_post_created=None):
    return PostFormController(
        store,
        Notifier(),
        Navigator(),
        mode=mode,
        draft=draft,
        on_post_created=on_post_created,
    )


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,content", [("", "X"), ("Title", ""), ("", "")])
    async def test_empty_required_field_never_calls_store(self, recording_store, title, content):
        controller = make_controller(recording_store, draft=PostDraft(title=title, content=content))

        state = await controller.submit()

        assert state is FormState.VALIDATION_REJECTED
        assert recording_store.calls == []
        assert [t.level for t in controller.notifier.toasts] == ["warning"]
        assert controller.notifier.toasts[0].message == REQUIRED_MESSAGE

    @pytest.mark.asyncio
    async def test_rejected_draft_is_preserved(self, recording_store):
        draft = PostDraft(title="", content="X", excerpt="keep me")
        controller = make_controller(recording_store, draft=draft)

        await controller.submit()

        assert controller.draft is draft
        assert controller.draft.excerpt == "keep me"
        assert controller.state is FormState.IDLE


class TestCreate:
    @pytest.mark.asyncio
    async def test_blank_excerpt_is_derived(self, recording_store, store):
        controller = make_controller(
            recording_store, draft=PostDraft(title="Hello", content="World", excerpt="")
        )

        state = await controller.submit()

        assert state is FormState.SUCCESS
        [post] = await store.list_posts()
        assert post.excerpt == "World..."
        assert post.published is True

    @pytest.mark.asyncio
    async def test_provided_excerpt_is_stored_verbatim(self, recording_store, store):
        excerpt = "An excerpt longer than the derived one would be. " * 5
        controller = make_controller(
            recording_store, draft=PostDraft(title="T", content="C", excerpt=excerpt)
        )

        await controller.submit()

        [post] = await store.list_posts()
        assert post.excerpt == excerpt

    @pytest.mark.asyncio
    async def test_success_resets_draft_and_calls_back(self, recording_store):
        created = []

        async def on_post_created():
            created.append(True)

        controller = make_controller(
            recording_store,
            draft=PostDraft(title="T", content="C", published=False),
            on_post_created=on_post_created,
        )

        await controller.submit()

        assert created == [True]
        assert controller.draft == PostDraft()
        assert controller.notifier.toasts[-1].message == "Post created successfully"
        assert controller.navigator.location is None

    @pytest.mark.asyncio
    async def test_store_failure_keeps_draft(self, recording_store):
        recording_store.fail("create_post")
        draft = PostDraft(title="T", content="C")
        controller = make_controller(recording_store, draft=draft)

        state = await controller.submit()

        assert state is FormState.STORE_FAILED
        assert controller.draft is draft
        assert controller.notifier.toasts[-1].level == "error"
        assert controller.notifier.toasts[-1].message == "Failed to create post"
        assert controller.navigator.location is None
        assert not controller.is_submitting


class TestUpdate:
    @pytest.mark.asyncio
    async def test_success_navigates_to_admin(self, recording_store, seed_post):
        seeded = seed_post()
        controller = make_controller(
            recording_store,
            mode=FormMode.UPDATE,
            draft=PostDraft(title="New", content="Body", id=seeded.id),
        )

        state = await controller.submit()

        assert state is FormState.SUCCESS
        assert controller.navigator.location == "/admin"
        assert controller.notifier.toasts[-1].message == "Post updated successfully"
        [(op, post_id, fields)] = recording_store.called("update_post")
        assert post_id == seeded.id
        assert fields.excerpt == "Body..."

    @pytest.mark.asyncio
    async def test_missing_post_surfaces_not_found_and_returns_to_list(self, recording_store):
        controller = make_controller(
            recording_store,
            mode=FormMode.UPDATE,
            draft=PostDraft(title="T", content="C", id="missing"),
        )

        state = await controller.submit()

        assert state is FormState.STORE_FAILED
        assert controller.notifier.toasts[-1].message == "Post not found"
        assert controller.navigator.location == "/admin"

    @pytest.mark.asyncio
    async def test_store_failure_does_not_navigate(self, recording_store, seed_post):
        seeded = seed_post()
        recording_store.fail("update_post", StoreError("connection reset"))
        controller = make_controller(
            recording_store,
            mode=FormMode.UPDATE,
            draft=PostDraft(title="T", content="C", id=seeded.id),
        )

        await controller.submit()

        assert controller.notifier.toasts[-1].message == "Failed to update post"
        assert controller.navigator.location is None


class TestInFlight:
    @pytest.mark.asyncio
    async def test_flag_is_set_only_while_store_call_runs(self, recording_store):
        controller = make_controller(recording_store, draft=PostDraft(title="T", content="C"))
        seen = []

        async def observe():
            seen.append(controller.is_submitting)

        recording_store.hook("create_post", observe)

        await controller.submit()

        assert seen == [True]
        assert not controller.is_submitting

    @pytest.mark.asyncio
    async def test_second_submit_while_in_flight_is_ignored(self, recording_store):
        controller = make_controller(recording_store, draft=PostDraft(title="T", content="C"))
        second = []

        async def resubmit():
            second.append(await controller.submit())

        recording_store.hook("create_post", resubmit)

        await controller.submit()

        assert second == [FormState.SUBMITTING]
        assert len(recording_store.called("create_post")) == 1

    @pytest.mark.asyncio
    async def test_result_after_unmount_is_ignored(self, recording_store):
        draft = PostDraft(title="T", content="C")
        controller = make_controller(recording_store, draft=draft)

        async def unmount():
            controller.mounted = False

        recording_store.hook("create_post", unmount)

        await controller.submit()

        assert controller.notifier.toasts == []
        assert controller.draft is draft
        assert not controller.is_submitting
