"""
Posts store for the Postdesk admin panel.
Async CRUD over the blog_posts table plus markdown rendering for previews.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Callable

import markdown
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from postdesk.db.models import Post, derive_excerpt, utcnow
from postdesk.errors import NotFound, StoreError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class PostFields:
    """Writable columns of a post, as sent on insert and update."""
    title: str
    content: str
    excerpt: str
    published: bool = True

    @classmethod
    def from_input(cls, title: str, content: str, excerpt: str = "", published: bool = True) -> "PostFields":
        """Validate required fields and derive the excerpt when blank."""
        if not title or not content:
            raise ValidationError("Title and content are required")
        return cls(
            title=title,
            content=content,
            excerpt=excerpt or derive_excerpt(content),
            published=published,
        )


def render_markdown(content: str) -> str:
    """Convert markdown to HTML. Raw HTML in the source is escaped, not passed through."""
    md = markdown.Markdown(extensions=['extra', 'codehilite', 'toc'])
    md.preprocessors.deregister('html_block')
    md.inlinePatterns.deregister('html')
    return md.convert(content)


class PostStore:
    """Remote table accessor for posts.

    Each operation opens its own session and runs the blocking ORM work in
    the threadpool, so callers only suspend at the await point.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def _call(self, operation: str, fn: Callable[[Session], object]):
        def run():
            with self._session_factory() as db:
                return fn(db)

        try:
            return await run_in_threadpool(run)
        except IntegrityError as e:
            logger.warning(f"Constraint violation during {operation}: {e.orig}")
            raise ValidationError(f"Post rejected by store: {e.orig}") from e
        except SQLAlchemyError as e:
            logger.error(f"Store failure during {operation}", exc_info=True)
            raise StoreError(f"Failed to {operation}") from e

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def list_posts(self) -> list[Post]:
        """All posts, newest first."""
        def query(db: Session) -> list[Post]:
            return db.query(Post).order_by(Post.created_at.desc()).all()

        return await self._call("list posts", query)

    async def get_post(self, post_id: str) -> Post:
        """Get a post by ID, raising NotFound when it does not exist."""
        def query(db: Session) -> Post:
            post = db.query(Post).filter(Post.id == post_id).first()
            if post is None:
                raise NotFound(post_id)
            return post

        return await self._call("load post", query)

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create_post(self, fields: PostFields) -> Post:
        """Insert a new post; id and timestamps are assigned here."""
        def insert(db: Session) -> Post:
            post = Post(**asdict(fields))
            db.add(post)
            db.commit()
            db.refresh(post)
            return post

        post = await self._call("create post", insert)
        logger.info(f"Created post {post.id}")
        return post

    async def update_post(self, post_id: str, fields: PostFields) -> Post:
        """Overwrite the writable fields of an existing post."""
        def update(db: Session) -> Post:
            post = db.query(Post).filter(Post.id == post_id).first()
            if post is None:
                raise NotFound(post_id)
            for name, value in asdict(fields).items():
                setattr(post, name, value)
            post.updated_at = utcnow()
            db.commit()
            db.refresh(post)
            return post

        post = await self._call("update post", update)
        logger.info(f"Updated post {post.id}")
        return post

    async def delete_post(self, post_id: str) -> None:
        """Delete a post by id. Deleting a missing id is a no-op."""
        def delete(db: Session) -> int:
            deleted = db.query(Post).filter(Post.id == post_id).delete()
            db.commit()
            return deleted

        deleted = await self._call("delete post", delete)
        if deleted:
            logger.info(f"Deleted post {post_id}")
        else:
            logger.info(f"Delete of missing post {post_id} ignored")
