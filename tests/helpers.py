"""Helper functions for tests."""

from urllib.parse import parse_qs

import httpx


async def sign_in(client: httpx.AsyncClient, code: str = "abc123") -> httpx.Response:
    """Complete the OAuth callback for the client's session.

    The token endpoint must already be stubbed.
    """
    response = await client.get("/auth/callback", params={"code": code})
    assert response.status_code == 302, response.text
    return response


def form_data(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body into single values."""
    parsed = parse_qs(request.content.decode())
    return {key: values[0] for key, values in parsed.items()}


def bearer(call) -> str:
    """Return the Authorization header of a recorded respx call."""
    return call.request.headers["Authorization"]
