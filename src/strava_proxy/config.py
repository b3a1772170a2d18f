"""Proxy configuration from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STRAVA_SCOPES = ["read", "activity:read_all"]


class ProxyConfig(BaseSettings):
    """Strava application credentials and proxy settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    strava_client_id: str = ""
    strava_client_secret: str = ""
    strava_redirect_uri: str = "http://localhost:3000/auth/callback"
    strava_oauth_scopes: str | None = None
    strava_approval_prompt: Literal["auto", "force"] = "auto"
    strava_timeout_seconds: float = 30.0

    session_secret: str = ""
    session_ttl_seconds: int = 12 * 60 * 60
    session_https_only: bool = False
    token_store: Literal["session", "shared"] = "session"

    post_login_redirect: str = "/segments.html"
    static_dir: str | None = None

    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @model_validator(mode="after")
    def validate_credentials(self) -> ProxyConfig:
        """Validate that required credentials are configured."""
        if not self.strava_client_id or self.strava_client_id == "your_client_id_here":
            raise ValueError("STRAVA_CLIENT_ID is not configured. Please set it in your .env file.")
        if not self.strava_client_secret or self.strava_client_secret == "your_client_secret_here":
            raise ValueError(
                "STRAVA_CLIENT_SECRET is not configured. Please set it in your .env file."
            )
        if not self.session_secret:
            raise ValueError("SESSION_SECRET is not configured. Please set it in your .env file.")
        return self

    @property
    def scopes(self) -> list[str]:
        """Scopes requested from Strava during authorization."""
        if self.strava_oauth_scopes:
            scopes = [s.strip() for s in self.strava_oauth_scopes.split(",") if s.strip()]
            return scopes or DEFAULT_STRAVA_SCOPES
        return DEFAULT_STRAVA_SCOPES
