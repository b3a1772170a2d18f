"""Pytest configuration and shared fixtures."""

import httpx
import pytest
import respx

from strava_proxy.app import create_app
from strava_proxy.config import ProxyConfig
from strava_proxy.token_store import SessionTokenStore
from tests.stubs.strava_api_stub import StravaAPIStubber


@pytest.fixture
def mock_config():
    """Provide a Strava proxy configuration for testing."""
    return ProxyConfig(
        _env_file=None,
        strava_client_id="test_client_id",
        strava_client_secret="test_client_secret",
        strava_redirect_uri="http://localhost:3000/auth/callback",
        session_secret="test_session_secret",
    )


@pytest.fixture
def respx_mock():
    """Provide a respx mock router for HTTP requests to Strava."""
    with respx.mock(base_url="https://www.strava.com", assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def stub_api(respx_mock):
    """Provide a Strava API stubber."""
    return StravaAPIStubber(respx_mock)


@pytest.fixture
def token_store():
    """Provide an empty per-session token store."""
    return SessionTokenStore()


@pytest.fixture
def app(mock_config, token_store):
    """Provide the proxy application wired to the test store."""
    return create_app(mock_config, token_store=token_store)


@pytest.fixture
def make_client(app):
    """Build browser-like clients; each keeps its own session cookie."""

    def factory(application=None):
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=application or app),
            base_url="http://testserver",
        )

    return factory


@pytest.fixture
async def client(make_client):
    """Provide a single browser-like client."""
    async with make_client() as client:
        yield client
