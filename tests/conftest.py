"""Shared pytest fixtures and configuration

Environment is set before any postdesk module is imported so the module-level
configuration (secret key, database path) picks it up.
"""

import os
import tempfile
from pathlib import Path

os.environ.setdefault("POSTDESK_SECRET_KEY", "test-secret-key")
os.environ.setdefault("POSTDESK_DB_PATH", str(Path(tempfile.gettempdir()) / "postdesk-test.db"))
os.environ.setdefault("POSTDESK_ADMIN_PASSWORD", "correct-horse")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from postdesk.db.database import init_db
from postdesk.db.models import Post
from postdesk.errors import StoreError
from postdesk.main import app
from postdesk.routes import admin as admin_routes
from postdesk.routes import auth as auth_routes
from postdesk.services.posts import PostStore
from postdesk.services.sessions import RequestAuth, SessionBroker
from postdesk.views.base import ViewContext


class RecordingStore:
    """Wraps a PostStore, recording every call.

    `fail(op)` makes an operation raise; `hook(op, fn)` awaits `fn()` once the
    underlying call has completed, before the result is handed back.
    """

    def __init__(self, inner: PostStore):
        self.inner = inner
        self.calls = []
        self.failures = {}
        self.hooks = {}

    def fail(self, op, exc=None):
        self.failures[op] = exc or StoreError(f"{op} failed")

    def hook(self, op, fn):
        self.hooks[op] = fn

    def called(self, op):
        return [call for call in self.calls if call[0] == op]

    async def _run(self, op, *args):
        self.calls.append((op, *args))
        if op in self.failures:
            raise self.failures[op]
        result = await getattr(self.inner, op)(*args)
        if op in self.hooks:
            await self.hooks[op]()
        return result

    async def list_posts(self):
        return await self._run("list_posts")

    async def get_post(self, post_id):
        return await self._run("get_post", post_id)

    async def create_post(self, fields):
        return await self._run("create_post", fields)

    async def update_post(self, post_id, fields):
        return await self._run("update_post", post_id, fields)

    async def delete_post(self, post_id):
        return await self._run("delete_post", post_id)


# ==================== Store ====================


@pytest.fixture
def engine():
    """In-memory SQLite shared across the store's threadpool calls"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def store(session_factory):
    return PostStore(session_factory)


@pytest.fixture
def recording_store(store):
    return RecordingStore(store)


@pytest.fixture
def seed_post(session_factory):
    """Insert a post row synchronously and return it"""

    def _seed(title="Seeded", content="Seeded content", excerpt=None, published=True, created_at=None):
        with session_factory() as db:
            post = Post(title=title, content=content, excerpt=excerpt, published=published)
            if created_at is not None:
                post.created_at = created_at
            db.add(post)
            db.commit()
            db.refresh(post)
            return post

    return _seed


# ==================== Sessions & views ====================


@pytest.fixture
def broker():
    return SessionBroker("test-secret")


@pytest.fixture
def token(broker):
    return broker.issue()


@pytest.fixture
def context(recording_store, broker, token):
    """View context with a valid session"""
    return ViewContext(store=recording_store, auth=RequestAuth(broker, token))


@pytest.fixture
def anonymous_context(recording_store, broker):
    return ViewContext(store=recording_store, auth=RequestAuth(broker, None))


# ==================== HTTP ====================


@pytest.fixture
def client(store, broker):
    """TestClient wired to the in-memory store and the test session broker"""
    app.dependency_overrides[admin_routes.get_store] = lambda: store
    app.dependency_overrides[auth_routes.get_sessions] = lambda: broker
    auth_routes.limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client, token):
    """TestClient carrying a valid admin session cookie"""
    client.cookies.set(auth_routes.SESSION_COOKIE_NAME, token)
    return client
