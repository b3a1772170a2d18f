"""Tests for proxy configuration."""

import pytest
from pydantic import ValidationError

from strava_proxy.config import ProxyConfig

REQUIRED = {
    "strava_client_id": "id",
    "strava_client_secret": "secret",
    "session_secret": "cookie-secret",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("STRAVA_CLIENT_ID", "STRAVA_CLIENT_SECRET", "SESSION_SECRET", "TOKEN_STORE"):
        monkeypatch.delenv(name, raising=False)


class TestProxyConfig:
    """Test ProxyConfig loading and validation."""

    def test_defaults(self):
        """Test the documented defaults."""
        config = ProxyConfig(_env_file=None, **REQUIRED)

        assert config.scopes == ["read", "activity:read_all"]
        assert config.token_store == "session"
        assert config.post_login_redirect == "/segments.html"
        assert config.port == 3000

    def test_from_environment(self, monkeypatch):
        """Test values are read from environment variables."""
        monkeypatch.setenv("STRAVA_CLIENT_ID", "env-id")
        monkeypatch.setenv("STRAVA_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("SESSION_SECRET", "env-cookie")
        monkeypatch.setenv("TOKEN_STORE", "shared")

        config = ProxyConfig(_env_file=None)

        assert config.strava_client_id == "env-id"
        assert config.token_store == "shared"

    @pytest.mark.parametrize("missing", sorted(REQUIRED))
    def test_missing_required(self, missing):
        """Test a missing credential is rejected."""
        values = {**REQUIRED, missing: ""}

        with pytest.raises(ValidationError):
            ProxyConfig(_env_file=None, **values)

    def test_placeholder_client_id(self):
        """Test the .env.example placeholder is rejected."""
        with pytest.raises(ValidationError, match="STRAVA_CLIENT_ID"):
            ProxyConfig(_env_file=None, **{**REQUIRED, "strava_client_id": "your_client_id_here"})

    def test_blank_scopes_fall_back(self):
        """Test an empty scope list falls back to the defaults."""
        config = ProxyConfig(_env_file=None, strava_oauth_scopes=" , ", **REQUIRED)

        assert config.scopes == ["read", "activity:read_all"]
