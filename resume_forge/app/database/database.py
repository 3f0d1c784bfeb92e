import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from resume_forge.app.core.config import get_settings

log = logging.getLogger(__name__)

# Global variables for engine and sessionmaker
_engine = None
_SessionLocal = None


def build_engine(database_url: str) -> Engine:
    """Create an engine for the given database URL.

    Args:
        database_url (str): SQLAlchemy database URL.

    Returns:
        Engine: A new SQLAlchemy engine.

    Notes:
        1. SQLite connections are allowed to cross threads, because FastAPI runs
           synchronous work in a thread pool, and wait up to 30 seconds on a locked database.
        2. Connections are checked before use so a restarted database server surfaces
           as a fresh connection rather than a stale-socket error.

    """
    _msg = "Creating database engine"
    log.debug(_msg)
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def get_engine():
    """Get or create the database engine.

    Args:
        None

    Returns:
        Engine: The SQLAlchemy engine instance used to connect to the database.

    Notes:
        1. Create the engine only when first accessed to avoid premature connection.
        2. Reuse the same engine instance on subsequent calls to ensure consistency.

    """
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(str(settings.database_url))
    return _engine


def get_session_local():
    """Get or create the session local factory.

    Args:
        None

    Returns:
        sessionmaker: The SQLAlchemy sessionmaker instance used to create database sessions.

    Notes:
        1. Create the sessionmaker only when first accessed to avoid premature configuration.
        2. Reuse the same sessionmaker instance on subsequent calls.
        3. No network access in this function itself; it uses the previously created engine.

    """
    global _SessionLocal
    if _SessionLocal is None:
        _msg = "Creating session local factory"
        log.debug(_msg)
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=get_engine(),
        )
    return _SessionLocal
