"""Database package for the Postdesk admin panel."""

from postdesk.db.database import get_session_factory, init_db, Base
from postdesk.db.models import Post

__all__ = ["get_session_factory", "init_db", "Base", "Post"]
