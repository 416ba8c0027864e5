import pytest
from fastapi.testclient import TestClient
from typing import Generator
import logging

# Configure logging for tests to reduce noise
logging.basicConfig(level=logging.INFO)
for noisy_logger in ['sqlalchemy.engine', 'httpx', 'asyncio', 'aiosqlite']:
    logging.getLogger(noisy_logger).setLevel(logging.WARNING)

from useraccounts.config import Settings
from useraccounts.main import create_app
from useraccounts.schemas.user import UserCreate
from useraccounts.services.user_store import InMemoryUserStore


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    """Settings that ignore any local .env file."""
    return Settings(_env_file=None, user_store_backend="memory", log_level="WARNING")


@pytest.fixture(scope="function")
def user_store() -> Generator[InMemoryUserStore, None, None]:
    store = InMemoryUserStore()
    yield store
    store.clear()


@pytest.fixture(scope="function")
def test_client(test_settings, user_store) -> Generator[TestClient, None, None]:
    """Creates a test client around a fresh in-memory store."""
    app = create_app(settings=test_settings, store=user_store)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def registration() -> dict:
    return {"username": "ana", "email": "ana@example.com", "password": "s3cret"}


@pytest.fixture
def user_create(registration) -> UserCreate:
    return UserCreate(**registration)
