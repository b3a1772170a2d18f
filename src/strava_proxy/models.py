"""Token models shared by the OAuth service and the token stores."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel


class TokenResponse(BaseModel):
    """OAuth token response from the Strava token endpoint."""

    access_token: str
    refresh_token: str
    token_type: str | None = None
    expires_at: int | None = None
    expires_in: int | None = None


@dataclass(frozen=True)
class TokenPair:
    """Access/refresh token pair held for one principal."""

    access_token: str
    refresh_token: str
    expires_at: int | None = None

    @classmethod
    def from_response(cls, response: TokenResponse) -> "TokenPair":
        return cls(
            access_token=response.access_token,
            refresh_token=response.refresh_token,
            expires_at=response.expires_at,
        )


@dataclass
class StoredTokens:
    """Token pair plus the bookkeeping used for session expiry."""

    tokens: TokenPair
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
