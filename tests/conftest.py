"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing:
- JWT and password handlers
- Ephemeral store (fakeredis) and account store (temp file)
- Services wired around a mocked email queue
- API clients
"""

import os
import sys
import json
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
import fakeredis
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before imports
os.environ["ACCESS_TOKEN_SECRET"] = "test_access_secret_for_testing_only_32bytes!"
os.environ["REFRESH_TOKEN_SECRET"] = "test_refresh_secret_for_testing_only_32bytes"
os.environ["ENVIRONMENT"] = "test"

from baatcheet.config import Config, TokenConfig
from baatcheet.auth import JWTHandler, AccountStore, Account, PasswordHandler
from baatcheet.cache import EphemeralStore
from baatcheet.mail import EmailQueue
from baatcheet.services import (
    ServiceContext,
    SessionService,
    RegistrationService,
    PasswordResetService,
    UserService,
)


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture(scope="session")
def test_config():
    """Test configuration values."""
    return {
        "access_secret": "test_access_secret_for_testing_only_32bytes!",
        "refresh_secret": "test_refresh_secret_for_testing_only_32bytes",
        "test_username": "alice",
        "test_email": "a@x.com",
        "test_password": "Abc123!",
    }


@pytest.fixture
def token_config(test_config) -> TokenConfig:
    return TokenConfig(
        access_secret=test_config["access_secret"],
        refresh_secret=test_config["refresh_secret"],
        access_expiry_seconds=900,
        refresh_expiry_seconds=7 * 24 * 60 * 60,
        rotate_refresh_tokens=False
    )


@pytest.fixture
def app_config(token_config) -> Config:
    config = Config(tokens=token_config)
    config.environment = "test"
    return config


# =============================================================================
# JWT / Password Fixtures
# =============================================================================

@pytest.fixture
def jwt_handler(token_config) -> JWTHandler:
    """Create a JWTHandler with test secrets."""
    return JWTHandler(token_config)


@pytest.fixture
def password_handler() -> PasswordHandler:
    """Create a PasswordHandler with the minimum work factor."""
    return PasswordHandler(rounds=4)


@pytest.fixture
def valid_access_token(jwt_handler, test_config) -> str:
    return jwt_handler.create_access_token(
        account_id="a" * 32,
        email=test_config["test_email"]
    )


@pytest.fixture
def valid_refresh_token(jwt_handler) -> str:
    return jwt_handler.create_refresh_token(account_id="a" * 32)


@pytest.fixture
def expired_token(jwt_handler, test_config) -> str:
    """Create an expired access token."""
    return jwt_handler.create_access_token(
        account_id="a" * 32,
        email=test_config["test_email"],
        expires_in=-10  # Already expired
    )


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def fake_redis() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def store(fake_redis) -> EphemeralStore:
    """Ephemeral store over fakeredis."""
    return EphemeralStore(client=fake_redis)


@pytest.fixture
def temp_accounts_file() -> Generator[Path, None, None]:
    """Create a temporary file for account storage."""
    with tempfile.NamedTemporaryFile(
        mode='w', suffix='.json', delete=False
    ) as f:
        json.dump({}, f)
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


@pytest.fixture
def account_store(temp_accounts_file, password_handler) -> AccountStore:
    """Create an AccountStore with temporary file."""
    return AccountStore(file_path=temp_accounts_file, password_handler=password_handler)


@pytest.fixture
def sample_account(account_store, test_config) -> Account:
    """Create a verified sample account in the store."""
    return account_store.create_account(
        username=test_config["test_username"],
        email=test_config["test_email"],
        password=test_config["test_password"],
        is_verified=True
    )


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def mail_queue() -> MagicMock:
    """Email queue that records jobs instead of sending."""
    queue = MagicMock(spec=EmailQueue)
    queue.enqueue.return_value = "job-1"
    return queue


@pytest.fixture
def context(app_config, store, account_store, jwt_handler, password_handler, mail_queue) -> ServiceContext:
    return ServiceContext(
        config=app_config,
        store=store,
        accounts=account_store,
        jwt=jwt_handler,
        passwords=password_handler,
        mail=mail_queue
    )


@pytest.fixture
def session_service(context) -> SessionService:
    return SessionService(context)


@pytest.fixture
def registration_service(context, session_service) -> RegistrationService:
    return RegistrationService(context, session_service)


@pytest.fixture
def password_reset_service(context) -> PasswordResetService:
    return PasswordResetService(context)


@pytest.fixture
def user_service(context) -> UserService:
    return UserService(context)


@pytest.fixture
def services(context):
    """Real services container around the test context."""
    from api.deps import build_services
    return build_services(context)


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_app():
    """Create FastAPI app for testing."""
    from api.main import app
    return app


@pytest.fixture
def api_client(api_app) -> TestClient:
    """Create synchronous test client for API."""
    return TestClient(api_app)


@pytest.fixture
def client(api_client, services) -> Generator[TestClient, None, None]:
    """API client whose endpoints run against the test services."""
    with patch("api.deps.get_services", return_value=services):
        yield api_client


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as API endpoint test"
    )
