import logging
from unittest.mock import MagicMock, patch

import pytest

from resume_forge.app.database import database

log = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def reset_database_globals():
    """Reset the lazily created engine and session factory around each test."""
    database._engine = None
    database._SessionLocal = None
    yield
    database._engine = None
    database._SessionLocal = None


class TestDatabase:
    """Test cases for database functionality."""

    def test_build_engine_for_sqlite_allows_threads(self):
        with patch("resume_forge.app.database.database.create_engine") as mock_create_engine:
            database.build_engine("sqlite:///./ledger.db")

        mock_create_engine.assert_called_once_with(
            "sqlite:///./ledger.db",
            pool_pre_ping=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    def test_build_engine_for_postgres(self):
        with patch("resume_forge.app.database.database.create_engine") as mock_create_engine:
            database.build_engine("postgresql://user@localhost/db")

        mock_create_engine.assert_called_once_with(
            "postgresql://user@localhost/db",
            pool_pre_ping=True,
            connect_args={},
        )

    def test_get_engine_is_created_once(self):
        mock_settings = MagicMock()
        mock_settings.database_url = "postgresql://user@localhost/db"
        with (
            patch("resume_forge.app.database.database.get_settings", return_value=mock_settings),
            patch("resume_forge.app.database.database.create_engine") as mock_create_engine,
        ):
            first = database.get_engine()
            second = database.get_engine()

        assert first is second
        mock_create_engine.assert_called_once()

    def test_session_local(self):
        with (
            patch("resume_forge.app.database.database.get_engine") as mock_get_engine,
            patch("resume_forge.app.database.database.sessionmaker") as mock_sessionmaker,
        ):
            session_local = database.get_session_local()
            assert database.get_session_local() is session_local

        mock_sessionmaker.assert_called_once_with(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=mock_get_engine.return_value,
        )
