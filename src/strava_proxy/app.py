"""Starlette application factory."""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.routing import Mount
from starlette.staticfiles import StaticFiles

from .config import ProxyConfig
from .oauth import StravaOAuthService
from .routes import routes
from .token_store import TokenStore, create_token_store

logger = logging.getLogger(__name__)

SESSION_COOKIE = "strava_proxy_session"


def create_app(
    config: ProxyConfig | None = None,
    token_store: TokenStore | None = None,
    oauth_service: StravaOAuthService | None = None,
) -> Starlette:
    """Create the proxy application.

    Args:
        config: Settings; loaded from the environment when omitted
        token_store: Store for token pairs; chosen from config when omitted
        oauth_service: Strava OAuth service; built from config when omitted

    Returns:
        Configured Starlette instance
    """
    config = config or ProxyConfig()

    app_routes = list(routes)
    if config.static_dir:
        # Mounted last so the API routes take precedence.
        app_routes.append(Mount("/", app=StaticFiles(directory=config.static_dir, html=True)))
        logger.info("Serving static files from %s", config.static_dir)

    middleware = [
        Middleware(
            SessionMiddleware,
            secret_key=config.session_secret,
            session_cookie=SESSION_COOKIE,
            max_age=config.session_ttl_seconds,
            same_site="lax",
            https_only=config.session_https_only,
        )
    ]

    app = Starlette(routes=app_routes, middleware=middleware)
    app.state.config = config
    app.state.token_store = token_store or create_token_store(config)
    app.state.oauth_service = oauth_service or StravaOAuthService(config)
    return app
