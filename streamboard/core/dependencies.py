"""Shared roster state and dependency injection utilities"""

import logging
from dataclasses import dataclass

import httpx

from streamboard.cache import AsyncTTLCache
from streamboard.core.config import Settings, get_settings
from streamboard.models import Roster
from streamboard.services import CredentialStore, HelixClient, RosterService

logger = logging.getLogger(__name__)


@dataclass
class RosterContext:
    """Process-wide state behind the roster: HTTP client, token slot, both query caches."""

    http: httpx.AsyncClient
    credentials: CredentialStore
    users_cache: AsyncTTLCache
    streams_cache: AsyncTTLCache
    service: RosterService

    @classmethod
    def create(cls, settings: Settings, http: httpx.AsyncClient | None = None) -> "RosterContext":
        if http is None:
            # Shared HTTP client, reuses TCP connections across requests
            http = httpx.AsyncClient(timeout=settings.http_timeout)
        credentials = CredentialStore(settings, http)
        helix = HelixClient(settings.twitch_client_id, http, settings.helix_base)
        users_cache = AsyncTTLCache("users", settings.users_cache_ttl)
        streams_cache = AsyncTTLCache("streams", settings.streams_cache_ttl)
        service = RosterService(settings, credentials, helix, users_cache, streams_cache)
        return cls(
            http=http,
            credentials=credentials,
            users_cache=users_cache,
            streams_cache=streams_cache,
            service=service,
        )

    async def close(self) -> None:
        await self.http.aclose()


_context: RosterContext | None = None


def get_roster_context() -> RosterContext:
    """Get the shared RosterContext singleton (connection reuse + caches)."""
    global _context
    if _context is None:
        _context = RosterContext.create(get_settings())
    return _context


async def close_roster_context() -> None:
    """Close the shared RosterContext. Call on app shutdown."""
    global _context
    if _context is not None:
        await _context.close()
        _context = None


def get_roster_service() -> RosterService:
    """FastAPI dependency for the roster service."""
    return get_roster_context().service


async def get_roster() -> Roster:
    """Build the current roster from the shared context.

    Raises AggregationError on any failure; never returns a partial roster.
    """
    return await get_roster_context().service.build_roster()
