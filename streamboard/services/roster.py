"""Roster aggregation: token, both Helix lookups in parallel, merge, sort.

``merge_roster`` is a pure function of the configured channels and the two
lookup mappings; ``RosterService`` wraps it with the token and cache plumbing.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence

from streamboard.cache import AsyncTTLCache
from streamboard.core.config import Settings
from streamboard.core.errors import AggregationError, AuthError, ConfigError, UpstreamError
from streamboard.models import (
    AccessToken,
    ChannelRequest,
    Roster,
    Streamer,
    StreamStatus,
    UserMetadata,
)

from .credentials import CredentialStore
from .twitch_api import HelixClient

logger = logging.getLogger(__name__)

# The query is always "every configured channel", so one key per cache
USERS_KEY = "users"
STREAMS_KEY = "streams"


def roster_sort_key(streamer: Streamer) -> tuple[bool, int, str]:
    """Live first, then most viewers, then display name (case-insensitive)."""
    return (
        not streamer.is_live,
        -(streamer.viewer_count or 0),
        streamer.display_name.lower(),
    )


def merge_roster(
    channels: Sequence[ChannelRequest],
    users: Mapping[str, UserMetadata],
    streams: Mapping[str, StreamStatus],
) -> list[Streamer]:
    """Join channels with user and stream data, then sort.

    Channels without user metadata are dropped: the login does not exist
    upstream (or was renamed), and nothing is surfaced for it.
    """
    streamers: list[Streamer] = []
    for channel in channels:
        key = channel.channel_key.lower()
        user = users.get(key)
        if user is None:
            logger.debug(f"No user metadata for '{key}', skipping")
            continue
        stream = streams.get(key)
        streamers.append(
            Streamer(
                display_name=channel.display_name,
                channel_key=key,
                avatar_url=user.avatar_url,
                is_live=stream is not None,
                viewer_count=stream.viewer_count if stream else None,
                title=stream.title if stream else None,
            )
        )
    streamers.sort(key=roster_sort_key)
    return streamers


class RosterService:
    """Builds a fresh Roster on every call; all shared state lives in its collaborators."""

    def __init__(
        self,
        settings: Settings,
        credentials: CredentialStore,
        helix: HelixClient,
        users_cache: AsyncTTLCache,
        streams_cache: AsyncTTLCache,
    ):
        self.settings = settings
        self.credentials = credentials
        self.helix = helix
        self.users_cache = users_cache
        self.streams_cache = streams_cache
        self.channels = settings.channel_requests

    async def _fetch_both(
        self, token: AccessToken
    ) -> tuple[dict[str, UserMetadata], dict[str, StreamStatus]]:
        logins = [c.channel_key for c in self.channels]
        users, streams = await asyncio.gather(
            self.users_cache.get_or_fetch(USERS_KEY, lambda: self.helix.get_users(logins, token)),
            self.streams_cache.get_or_fetch(
                STREAMS_KEY, lambda: self.helix.get_streams(logins, token)
            ),
        )
        return users, streams

    async def build_roster(self) -> Roster:
        """Return the ordered roster or raise AggregationError."""
        try:
            token = await self.credentials.get_valid_token()
        except (ConfigError, AuthError) as e:
            logger.error(f"Cannot build roster, no app token: {e}")
            raise AggregationError("token", e) from e

        try:
            users, streams = await self._fetch_both(token)
        except UpstreamError as e:
            logger.error(f"Cannot build roster, Helix query failed: {e}")
            raise AggregationError("fetch", e) from e

        streamers = merge_roster(self.channels, users, streams)
        logger.debug(
            f"Roster built: {len(streamers)}/{len(self.channels)} channels, "
            f"{sum(s.is_live for s in streamers)} live"
        )
        return Roster(base_addr=self.settings.current_base_addr(), streamers=streamers)
