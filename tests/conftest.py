import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from resume_forge.app.api.dependencies import get_generator_client, get_ledger_store
from resume_forge.app.core.config import Settings, get_settings
from resume_forge.app.core.security import create_access_token
from resume_forge.app.database.database import build_engine
from resume_forge.app.ledger.store import LedgerStore
from resume_forge.app.main import create_app
from resume_forge.app.models import Base
from tests.helpers import TEST_USER_ID, WEBHOOK_SECRET, FakeGenerator


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        GEMINI_API_KEY="test-gemini-key",
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
        STRIPE_PRICE_ID="price_123",
        GENERATION_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def engine(tmp_path):
    """A file-backed SQLite engine with the schema created."""
    _engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(_engine)
    yield _engine
    _engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@pytest.fixture
def ledger(session_factory) -> LedgerStore:
    return LedgerStore(session_factory)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def app(settings, ledger, fake_generator) -> FastAPI:
    """Fixture to create a new app for each test, wired to the test ledger and generator."""
    get_settings.cache_clear()
    _app = create_app()
    _app.dependency_overrides[get_settings] = lambda: settings
    _app.dependency_overrides[get_ledger_store] = lambda: ledger
    _app.dependency_overrides[get_generator_client] = lambda: fake_generator
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Fixture to create a test client for each test."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(settings) -> dict:
    token = create_access_token(data={"sub": TEST_USER_ID}, settings=settings)
    return {"Authorization": f"Bearer {token}"}
