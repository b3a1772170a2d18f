"""Token storage - per-session and process-wide token stores."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Protocol

from .config import ProxyConfig
from .models import StoredTokens, TokenPair

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(hours=12)


class TokenStore(Protocol):
    """Common interface for holding the current token pair of a principal.

    A principal is the session id carried by the browser cookie. Stores that
    are not scoped per user are free to ignore it.
    """

    async def get(self, principal: str) -> TokenPair | None:
        """Return the stored pair, or None when the principal is not authenticated."""
        ...

    async def set(self, principal: str, tokens: TokenPair) -> None:
        """Store a pair, replacing any previous one."""
        ...

    async def remove(self, principal: str) -> None:
        """Forget the principal's tokens."""
        ...

    def refresh_lock(self, principal: str) -> asyncio.Lock:
        """Lock serialising token refreshes for the principal."""
        ...


class SessionTokenStore:
    """In-memory store mapping session ids to token pairs, with expiry."""

    def __init__(self, ttl: timedelta = SESSION_TTL) -> None:
        self.ttl = ttl
        self._lock = asyncio.Lock()
        self._entries: dict[str, StoredTokens] = {}
        self._refresh_locks: dict[str, asyncio.Lock] = {}

    async def get(self, principal: str) -> TokenPair | None:
        async with self._lock:
            entry = self._ensure_active_locked(principal)
            return entry.tokens if entry else None

    async def set(self, principal: str, tokens: TokenPair) -> None:
        now = self._now()
        async with self._lock:
            self._sweep_expired_locked(now)
            entry = self._entries.get(principal)
            if entry is None:
                self._entries[principal] = StoredTokens(
                    tokens=tokens,
                    created_at=now,
                    updated_at=now,
                    expires_at=now + self.ttl,
                )
                logger.debug("Session %s authenticated", principal)
                return
            entry.tokens = tokens
            entry.updated_at = now
            entry.expires_at = now + self.ttl

    async def remove(self, principal: str) -> None:
        async with self._lock:
            self._forget_locked(principal)

    def refresh_lock(self, principal: str) -> asyncio.Lock:
        return self._refresh_locks.setdefault(principal, asyncio.Lock())

    def __len__(self) -> int:
        return len(self._entries)

    def _ensure_active_locked(self, principal: str) -> StoredTokens | None:
        """Drop the entry if it has expired, otherwise extend it. Assumes lock held."""
        entry = self._entries.get(principal)
        if entry is None:
            return None

        now = self._now()
        if entry.expires_at < now:
            logger.info("Session %s expired", principal)
            self._forget_locked(principal)
            return None

        entry.expires_at = now + self.ttl
        return entry

    def _sweep_expired_locked(self, now: datetime) -> None:
        """Drop every expired entry. Assumes lock held."""
        expired = [key for key, entry in self._entries.items() if entry.expires_at < now]
        for principal in expired:
            self._forget_locked(principal)
        if expired:
            logger.info("Evicted %d expired sessions", len(expired))

    def _forget_locked(self, principal: str) -> None:
        """Remove a principal's entry. Assumes lock held."""
        self._entries.pop(principal, None)
        # A held refresh lock must survive so later requests queue behind it.
        lock = self._refresh_locks.get(principal)
        if lock is not None and not lock.locked():
            del self._refresh_locks[principal]

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)


class SharedTokenStore:
    """Single token pair shared by every request in the process.

    Only suitable for single-user deployments: whoever completes the OAuth flow
    last owns the tokens used for every caller.
    """

    def __init__(self) -> None:
        self._tokens: TokenPair | None = None
        self._refresh_lock = asyncio.Lock()

    async def get(self, principal: str) -> TokenPair | None:
        return self._tokens

    async def set(self, principal: str, tokens: TokenPair) -> None:
        self._tokens = tokens

    async def remove(self, principal: str) -> None:
        self._tokens = None

    def refresh_lock(self, principal: str) -> asyncio.Lock:
        return self._refresh_lock


def create_token_store(config: ProxyConfig) -> TokenStore:
    """Instantiate the token store selected by configuration."""
    if config.token_store == "shared":
        logger.warning("Using a shared token store; all browsers share one Strava login")
        return SharedTokenStore()
    return SessionTokenStore(ttl=timedelta(seconds=config.session_ttl_seconds))
