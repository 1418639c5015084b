# Database configuration using SQLAlchemy.
#
# The Database object owns the engine and session factory. create_app() builds
# exactly one per application and stores it on app.state; request handlers get
# a Session through the get_db dependency. Nothing here is created at import time.

import logging
import os

from fastapi import Request
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def mask_url(database_url: str) -> str:
    """Render a connection string with its password hidden."""
    return make_url(database_url).render_as_string(hide_password=True)


class Database:
    """Shared handle to the relational store for the life of the application."""

    def __init__(self, database_url: str, echo: bool = False):
        url = make_url(database_url)
        engine_kwargs = {"echo": echo}

        if url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory SQLite lives inside a single connection
            if url.database in (None, "", ":memory:"):
                engine_kwargs["poolclass"] = StaticPool

        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        logger.info(f"[DB] Working directory: {os.getcwd()}")
        logger.info(f"[DB] Using database: {mask_url(database_url)}")

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self):
        """Create the tables if they don't exist."""
        # Register the models on Base.metadata before create_all()
        from .models.user import User  # noqa: F401

        expected_tables = list(Base.metadata.tables.keys())
        logger.info(f"[DB] Expected tables: {', '.join(expected_tables)}")

        Base.metadata.create_all(bind=self.engine)

        existing_tables = inspect(self.engine).get_table_names()
        missing_tables = [t for t in expected_tables if t not in existing_tables]
        if missing_tables:
            logger.warning(f"[DB] Missing tables: {', '.join(missing_tables)}")
        else:
            logger.info("[DB] All tables created/verified")

    def ping(self) -> bool:
        """Return True if the store answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"[DB] Ping failed: {e}")
            return False

    def dispose(self):
        self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request):
    """
    Dependency that injects a DB session into FastAPI endpoints.
    """
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
