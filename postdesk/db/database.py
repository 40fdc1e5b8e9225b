"""
SQLite database setup for the Postdesk admin panel.
"""

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base

# Database path - configurable via environment variable
DB_PATH = os.getenv(
    "POSTDESK_DB_PATH",
    str(Path(__file__).parent.parent.parent / "data" / "postdesk.db"),
)

# A full URL wins over the SQLite path (e.g. a hosted Postgres instance)
SQLALCHEMY_DATABASE_URL = os.getenv("POSTDESK_DATABASE_URL", f"sqlite:///{DB_PATH}")


def sqlite_file(url: str) -> Optional[Path]:
    """File behind a SQLite URL, or None for other backends and in-memory databases."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or parsed.database in (None, "", ":memory:"):
        return None
    return Path(parsed.database)


if make_url(SQLALCHEMY_DATABASE_URL).get_backend_name() == "sqlite":
    # Ensure data directory exists
    db_file = sqlite_file(SQLALCHEMY_DATABASE_URL)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)
    connect_args = {"check_same_thread": False}  # Store calls run in a threadpool
else:
    connect_args = {}

# Create engine
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Session factory
# Posts are handed back to views after the session closes
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)

# Base class for models
Base = declarative_base()


def get_session_factory() -> sessionmaker:
    """Session factory used to build the post store."""
    return SessionLocal


def init_db(bind=None):
    """Initialize database tables."""
    from postdesk.db import models  # noqa: F401 - Import models to register them
    Base.metadata.create_all(bind=bind or engine)
