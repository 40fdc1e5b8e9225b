"""
Admin routes for Postdesk blog management.
Each request opens a view for its lifetime; navigation requested by the
view becomes a redirect, everything else is rendered.
"""

import logging

from fastapi import APIRouter, Request, Depends, Form

from postdesk.db.database import get_session_factory
from postdesk.routes.auth import get_request_auth
from postdesk.routes.pages import pending_toasts, redirect, render
from postdesk.services.navigation import ADMIN_PATH
from postdesk.services.posts import PostStore
from postdesk.services.sessions import RequestAuth
from postdesk.views.admin import AdminOrchestrator, DELETE_PROMPT
from postdesk.views.base import View, ViewContext
from postdesk.views.edit import EditView
from postdesk.views.forms import FormState, PostDraft

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


def get_store() -> PostStore:
    return PostStore(get_session_factory())


def get_view_context(
    request: Request,
    store: PostStore = Depends(get_store),
    auth: RequestAuth = Depends(get_request_auth),
) -> ViewContext:
    return ViewContext(store=store, auth=auth, notifier=pending_toasts(request))


def respond(request: Request, view: View, template: str, **context):
    """Redirect if the view navigated away, otherwise render it."""
    location = view.context.navigator.location
    if location:
        return redirect(location, view.context.notifier)
    response = render(request, template, view.context.notifier, view=view, **context)
    response.headers["Cache-Control"] = "no-store"
    return response


@router.get("/admin")
async def admin_dashboard(request: Request, context: ViewContext = Depends(get_view_context)):
    """List all posts with the create form."""
    async with AdminOrchestrator(context) as view:
        return respond(request, view, "admin/posts.html")


@router.post("/admin/posts")
async def admin_create_post(
    request: Request,
    title: str = Form(""),
    content: str = Form(""),
    excerpt: str = Form(""),
    published: bool = Form(False),
    context: ViewContext = Depends(get_view_context),
):
    """Create a new post."""
    async with AdminOrchestrator(context) as view:
        if context.navigator.location is None:
            view.form.draft = PostDraft(
                title=title, content=content, excerpt=excerpt, published=published
            )
            if await view.form.submit() is FormState.SUCCESS:
                context.navigator.go_to(ADMIN_PATH)
        return respond(request, view, "admin/posts.html")


@router.get("/admin/posts/{post_id}/delete")
async def admin_confirm_delete(
    request: Request,
    post_id: str,
    context: ViewContext = Depends(get_view_context),
):
    """Ask for confirmation before deleting."""
    async with EditView(context, post_id) as view:
        return respond(request, view, "admin/confirm_delete.html", prompt=DELETE_PROMPT)


@router.post("/admin/posts/{post_id}/delete")
async def admin_delete_post(
    request: Request,
    post_id: str,
    confirm: str = Form(""),
    context: ViewContext = Depends(get_view_context),
):
    """Delete a post once the confirmation form says yes."""
    context.confirm = lambda message: confirm == "yes"
    async with AdminOrchestrator(context) as view:
        if context.navigator.location is None:
            await view.delete_post(post_id)
            context.navigator.go_to(ADMIN_PATH)
        return respond(request, view, "admin/posts.html")


@router.get("/edit-post/{post_id}")
async def edit_post_page(
    request: Request,
    post_id: str,
    context: ViewContext = Depends(get_view_context),
):
    """Edit post form."""
    async with EditView(context, post_id) as view:
        return respond(request, view, "admin/edit.html")


@router.post("/edit-post/{post_id}")
async def edit_post_submit(
    request: Request,
    post_id: str,
    title: str = Form(""),
    content: str = Form(""),
    excerpt: str = Form(""),
    published: bool = Form(False),
    context: ViewContext = Depends(get_view_context),
):
    """Update a post."""
    async with EditView(context, post_id) as view:
        if context.navigator.location is None:
            view.apply(title, content, excerpt, published)
            await view.form.submit()
        return respond(request, view, "admin/edit.html")
