"""HTTP route handlers - OAuth kickoff/callback and the Strava data proxies."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from starlette.requests import Request
from starlette.responses import (
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.routing import Route

from .auth_context import RequestAuthContext
from .client import StravaAPIError, StravaClient
from .oauth import TokenRefreshError

logger = logging.getLogger(__name__)

SESSION_KEY = "sid"

NOT_AUTHENTICATED = "Usuario no autenticado"
FETCH_FAILED = "Error al obtener la información"
AUTH_FAILED = "Error autenticando con Strava."

Fetch = Callable[[StravaClient, Request], Awaitable[Any]]


def get_principal(request: Request) -> str:
    """Return the session id of the caller, creating one on first contact."""
    principal = request.session.get(SESSION_KEY)
    if not principal:
        principal = secrets.token_urlsafe(16)
        request.session[SESSION_KEY] = principal
    return principal


async def start_authorization(request: Request) -> Response:
    """Send the browser to Strava's authorization page."""
    oauth_service = request.app.state.oauth_service
    return RedirectResponse(oauth_service.build_authorization_url(), status_code=302)


async def complete_authorization(request: Request) -> Response:
    """Handle Strava's callback, exchange the code and store the tokens."""
    state = request.app.state
    query = request.query_params
    error = query.get("error")
    code = query.get("code")

    if error:
        logger.warning("Strava authorization denied: %s", error)
        return PlainTextResponse(f"Strava authorization failed: {error}", status_code=400)

    if not code:
        return PlainTextResponse("Missing authorization code.", status_code=400)

    logger.info("Received OAuth callback, exchanging authorization code")
    try:
        tokens = await state.oauth_service.exchange_code(code)
    except (httpx.HTTPError, ValueError):
        logger.exception("Failed to exchange authorization code")
        return PlainTextResponse(AUTH_FAILED, status_code=500)

    await state.token_store.set(get_principal(request), tokens)
    return RedirectResponse(state.config.post_login_redirect, status_code=302)


async def logout(request: Request) -> Response:
    """Forget the caller's tokens and drop the session cookie."""
    principal = request.session.get(SESSION_KEY)
    if principal:
        await request.app.state.token_store.remove(principal)
    request.session.clear()
    return RedirectResponse("/", status_code=302)


async def _proxy(
    request: Request,
    fetch: Fetch,
    unauthenticated: dict[str, Any],
) -> Response:
    """Run an authenticated Strava call for the caller and relay its JSON.

    A 401 from Strava triggers one token refresh and one retry inside
    StravaClient. Any failure left over is mapped to 401 (credentials unusable)
    or 500 (everything else); upstream details are only logged.
    """
    state = request.app.state
    principal = get_principal(request)
    tokens = await state.token_store.get(principal)
    if tokens is None:
        return JSONResponse(unauthenticated, status_code=401)

    context = RequestAuthContext(principal, tokens, state.token_store, state.oauth_service)
    try:
        async with StravaClient(context, timeout=state.config.strava_timeout_seconds) as client:
            data = await fetch(client, request)
    except TokenRefreshError as exc:
        logger.warning("Token refresh failed for %s: %s", request.url.path, exc)
        return JSONResponse(unauthenticated, status_code=401)
    except StravaAPIError as exc:
        if exc.status_code == 401:
            logger.warning("Strava still rejects credentials for %s", request.url.path)
            return JSONResponse(unauthenticated, status_code=401)
        logger.error("Strava request for %s failed: %s", request.url.path, exc.message)
        return JSONResponse({"error": FETCH_FAILED}, status_code=500)

    return JSONResponse(data)


async def user_info(request: Request) -> Response:
    """Relay the authenticated athlete's profile."""

    async def fetch(client: StravaClient, request: Request) -> Any:
        return await client.get_athlete()

    return await _proxy(request, fetch, {"error": NOT_AUTHENTICATED})


async def starred_segments(request: Request) -> Response:
    """Relay one page of the athlete's starred segments."""

    async def fetch(client: StravaClient, request: Request) -> Any:
        return await client.get_starred_segments(
            page=request.query_params.get("page"),
            per_page=request.query_params.get("per_page"),
        )

    return await _proxy(request, fetch, {"error": NOT_AUTHENTICATED})


async def segment_info(request: Request) -> Response:
    """Relay the details of one segment."""

    async def fetch(client: StravaClient, request: Request) -> Any:
        return await client.get_segment(request.query_params.get("id", ""))

    return await _proxy(
        request, fetch, {"status_code": 401, "error": NOT_AUTHENTICATED}
    )


async def ping(request: Request) -> Response:
    return PlainTextResponse("OK")


routes = [
    Route("/auth/strava", start_authorization, methods=["GET"]),
    Route("/auth/callback", complete_authorization, methods=["GET"]),
    Route("/auth/logout", logout, methods=["GET", "POST"]),
    Route("/api/userinfo", user_info, methods=["GET"]),
    Route("/api/userSegmentsStarred", starred_segments, methods=["GET"]),
    Route("/api/segmentInfo", segment_info, methods=["GET"]),
    Route("/ping", ping, methods=["GET"]),
]
