"""Strava OAuth flows - authorization URL, code exchange and token refresh."""

from __future__ import annotations

from urllib.parse import urlencode

import httpx

from .config import ProxyConfig
from .models import TokenPair, TokenResponse


class TokenRefreshError(Exception):
    """Raised when Strava refuses to refresh an access token."""


class StravaOAuthService:
    """Handle Strava OAuth flows and token refreshes."""

    AUTH_URL = "https://www.strava.com/oauth/authorize"
    TOKEN_URL = "https://www.strava.com/oauth/token"

    def __init__(self, config: ProxyConfig) -> None:
        self.config = config
        self.redirect_uri = config.strava_redirect_uri
        self.scopes = config.scopes

    def build_authorization_url(self) -> str:
        """Generate the Strava authorization URL."""
        params = {
            "client_id": self.config.strava_client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "scope": ",".join(self.scopes),
            "approval_prompt": self.config.strava_approval_prompt,
        }
        return f"{self.AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> TokenPair:
        """Exchange an authorization code for OAuth tokens.

        Raises:
            httpx.HTTPError: If the token request fails
            ValueError: If Strava answers without a usable token payload
        """
        token_data = await self._request_tokens(
            {
                "code": code,
                "grant_type": "authorization_code",
            }
        )
        return TokenPair.from_response(token_data)

    async def refresh(self, tokens: TokenPair) -> TokenPair:
        """Obtain a new token pair using the refresh token.

        Raises:
            TokenRefreshError: If the refresh request fails for any reason
        """
        try:
            token_data = await self._request_tokens(
                {
                    "grant_type": "refresh_token",
                    "refresh_token": tokens.refresh_token,
                }
            )
        except httpx.HTTPStatusError as e:
            raise TokenRefreshError(
                f"HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise TokenRefreshError(f"Request failed: {str(e)}") from e
        except ValueError as e:
            raise TokenRefreshError(f"Malformed token response: {str(e)}") from e
        return TokenPair.from_response(token_data)

    async def _request_tokens(self, grant: dict[str, str]) -> TokenResponse:
        async with httpx.AsyncClient(timeout=self.config.strava_timeout_seconds) as client:
            response = await client.post(
                self.TOKEN_URL,
                data={
                    "client_id": self.config.strava_client_id,
                    "client_secret": self.config.strava_client_secret,
                    **grant,
                },
            )
            response.raise_for_status()
            return TokenResponse.model_validate(response.json())
