"""Strava API client with automatic token refresh and error handling."""

import types
from typing import Any, Protocol
from urllib.parse import quote

import httpx


class StravaAuthContext(Protocol):
    """Common interface for accessing Strava credentials and refreshing tokens."""

    @property
    def strava_access_token(self) -> str:
        """Current Strava API access token."""
        ...

    async def refresh_tokens(self) -> None:
        """Refresh the Strava access token.

        Raises:
            TokenRefreshError: If the refresh is refused
        """
        ...


class StravaAPIError(Exception):
    """Custom exception for Strava API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class StravaClient:
    """Async HTTP client for Strava API with automatic token refresh."""

    BASE_URL = "https://www.strava.com/api/v3"

    def __init__(self, context: StravaAuthContext, timeout: float = 30.0):
        """Initialize the Strava API client."""
        self.context = context
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "StravaClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=self.timeout,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()

    def _get_headers(self) -> dict[str, str]:
        """Get authorization headers for API requests."""
        return {"Authorization": f"Bearer {self.context.strava_access_token}"}

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an authenticated request to the Strava API.

        Automatically refreshes token on 401 and retries once.
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        try:
            response = await self._client.request(
                method,
                endpoint,
                headers=self._get_headers(),
                **kwargs,
            )

            # Handle 401 - token expired
            if response.status_code == 401:
                await self.context.refresh_tokens()

                # Retry request with refreshed token
                response = await self._client.request(
                    method,
                    endpoint,
                    headers=self._get_headers(),
                    **kwargs,
                )

            if response.status_code == 401:
                raise StravaAPIError("Strava rejected the refreshed access token.", 401)

            if response.status_code == 404:
                raise StravaAPIError(
                    "Resource not found. Please check the ID and try again.",
                    404,
                )

            if response.status_code == 429:
                raise StravaAPIError(
                    "Rate limit exceeded. Please try again later.",
                    429,
                )

            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            raise StravaAPIError(
                f"HTTP {e.response.status_code}: {e.response.text}",
                e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise StravaAPIError(f"Request failed: {str(e)}") from e

    async def _get_json(self, endpoint: str, **kwargs: Any) -> Any:
        response = await self._request("GET", endpoint, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise StravaAPIError(f"Malformed response from {endpoint}: {str(e)}") from e

    # Athlete methods

    async def get_athlete(self) -> dict[str, Any]:
        """Get the authenticated athlete's profile."""
        return await self._get_json("/athlete")

    # Segment methods

    async def get_starred_segments(
        self,
        page: str | int | None = None,
        per_page: str | int | None = None,
    ) -> list[dict[str, Any]]:
        """Get one page of the athlete's starred segments.

        Paging values are passed to Strava exactly as received; missing ones
        are left for Strava to default.
        """
        params: dict[str, Any] = {}
        if page is not None:
            params["page"] = page
        if per_page is not None:
            params["per_page"] = per_page

        return await self._get_json("/segments/starred", params=params)

    async def get_segment(self, segment_id: str | int) -> dict[str, Any]:
        """Get detailed segment information."""
        return await self._get_json(f"/segments/{quote(str(segment_id), safe='')}")
