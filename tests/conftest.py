"""Pytest configuration and fixtures."""

from collections.abc import Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from captcha_relay.api.dependencies import clear_dependency_caches, get_recaptcha_client
from captcha_relay.api.server import app, limiter
from captcha_relay.core.settings import AppSettings, get_settings, reload_settings
from captcha_relay.core.settings.app_settings import (
    APIServerSettings,
    LoggingSettings,
    RecaptchaSettings,
    RedirectSettings,
)
from captcha_relay.services import RecaptchaClient
from tests.stubs import TEST_SECRET, TEST_VERIFY_URL, UpstreamStub


@pytest.fixture
def mock_settings() -> AppSettings:
    """
    Create mock application settings for testing.

    Returns:
        AppSettings: Mock settings instance.
    """
    return AppSettings(
        api_server=APIServerSettings(
            host="127.0.0.1",
            port=8080,
            cors_allow_origins=["http://localhost:3000"],
            rate_limit="100/minute",
        ),
        recaptcha=RecaptchaSettings(
            secret=TEST_SECRET,
            verify_url=TEST_VERIFY_URL,
            timeout=0.2,
            score_threshold=0.7,
        ),
        redirect=RedirectSettings(),
        logging=LoggingSettings(
            log_level="DEBUG",
            log_format="%(message)s",
        ),
    )


@pytest.fixture(autouse=True)
def reset_settings_cache() -> None:
    """
    Reset settings cache before each test.

    """
    reload_settings()


@pytest.fixture(autouse=True)
def reset_app_state() -> Generator[None, None, None]:
    """
    Reset rate limiter, dependency caches and overrides around each test.

    Yields:
        None
    """
    limiter.reset()
    clear_dependency_caches()
    yield
    app.dependency_overrides.clear()
    clear_dependency_caches()


@pytest.fixture
def upstream() -> UpstreamStub:
    """
    Create a fake verification provider.

    Returns:
        UpstreamStub: The provider stub.
    """
    return UpstreamStub()


@pytest.fixture
def recaptcha_client(upstream: UpstreamStub) -> RecaptchaClient:
    """
    Create a reCAPTCHA client talking to the provider stub.

    Args:
        upstream (UpstreamStub): Provider stub.

    Returns:
        RecaptchaClient: Client using a mock transport.
    """
    return RecaptchaClient(
        verify_url=TEST_VERIFY_URL,
        timeout=0.2,
        transport=httpx.MockTransport(upstream.handler),
    )


@pytest.fixture
def test_client(recaptcha_client: RecaptchaClient) -> TestClient:
    """
    Create a test client wired to the provider stub with a secret configured.

    Args:
        recaptcha_client (RecaptchaClient): Client using the provider stub.

    Returns:
        TestClient: FastAPI test client.
    """
    settings = get_settings()
    settings.recaptcha.secret = TEST_SECRET
    settings.recaptcha.timeout = 0.2
    app.dependency_overrides[get_recaptcha_client] = lambda: recaptcha_client
    return TestClient(app)
