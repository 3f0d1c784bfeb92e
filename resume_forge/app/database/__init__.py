"""Database engine and session factory management.

Functions:
    build_engine: Creates an engine for an explicit URL (used by tests and the CLI).
    get_engine: Returns the process-wide SQLAlchemy engine, created on first use.
    get_session_local: Returns the process-wide sessionmaker bound to that engine.

Notes:
    1. The database URL comes from the application settings.
    2. Nothing connects to the database until a session is used.

"""

from .database import build_engine, get_engine, get_session_local

__all__ = ["build_engine", "get_engine", "get_session_local"]
