"""Tests for the command line entry point and logging setup."""

import logging
import sys

from starlette.applications import Starlette

from strava_proxy import server
from strava_proxy.logging_config import PlainFormatter, setup_logging
from strava_proxy.token_store import SharedTokenStore


class TestMain:
    """Test the strava-proxy command."""

    def test_runs_uvicorn_with_overrides(self, monkeypatch):
        """Test command line flags override the environment."""
        monkeypatch.setenv("STRAVA_CLIENT_ID", "env-id")
        monkeypatch.setenv("STRAVA_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("SESSION_SECRET", "env-cookie")
        monkeypatch.setattr(
            sys, "argv", ["strava-proxy", "--port", "8123", "--token-store", "shared"]
        )
        calls = []
        monkeypatch.setattr(
            server.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs))
        )
        monkeypatch.setattr(server, "setup_logging", lambda level: None)

        server.main()

        assert len(calls) == 1
        app, kwargs = calls[0]
        assert isinstance(app, Starlette)
        assert isinstance(app.state.token_store, SharedTokenStore)
        assert kwargs["port"] == 8123
        assert kwargs["host"] == "127.0.0.1"


class TestSetupLogging:
    """Test logging configuration."""

    def test_configures_root_logger(self):
        """Test a single stderr handler with the plain formatter is installed."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("debug")

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, PlainFormatter)
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
