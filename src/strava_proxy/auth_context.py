"""Per-request authentication context combining the token store and OAuth service."""

from __future__ import annotations

import logging

from .models import TokenPair
from .oauth import StravaOAuthService, TokenRefreshError
from .token_store import TokenStore

logger = logging.getLogger(__name__)


class RequestAuthContext:
    """Credentials of the principal behind the current request.

    Implements the StravaAuthContext protocol used by StravaClient. A refresh
    replaces the stored pair wholesale; if it fails the principal's tokens are
    forgotten so the browser has to authenticate again.
    """

    def __init__(
        self,
        principal: str,
        tokens: TokenPair,
        token_store: TokenStore,
        oauth_service: StravaOAuthService,
    ) -> None:
        self.principal = principal
        self.tokens = tokens
        self._token_store = token_store
        self._oauth_service = oauth_service

    @property
    def strava_access_token(self) -> str:
        return self.tokens.access_token

    @property
    def strava_refresh_token(self) -> str:
        return self.tokens.refresh_token

    async def refresh_tokens(self) -> None:
        """Replace the access token after Strava rejected it.

        Raises:
            TokenRefreshError: If Strava refuses the refresh token
        """
        async with self._token_store.refresh_lock(self.principal):
            stored = await self._token_store.get(self.principal)
            if stored is None:
                # Logged out, expired or a concurrent refresh failed meanwhile.
                raise TokenRefreshError("Session is no longer authenticated")
            if stored.access_token != self.tokens.access_token:
                # A concurrent request of the same principal already refreshed.
                self.tokens = stored
                return

            try:
                self.tokens = await self._oauth_service.refresh(self.tokens)
            except TokenRefreshError:
                await self._token_store.remove(self.principal)
                raise

            await self._token_store.set(self.principal, self.tokens)
            logger.info("Refreshed Strava access token for %s", self.principal)
