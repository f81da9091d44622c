"""Twitch channel roster backend: cached app token, cached Helix lookups, merged roster."""

from streamboard.core.dependencies import get_roster
from streamboard.core.errors import (
    AggregationError,
    AuthError,
    ConfigError,
    StreamboardError,
    UpstreamError,
)
from streamboard.models import ChannelRequest, Roster, Streamer

__all__ = [
    "AggregationError",
    "AuthError",
    "ChannelRequest",
    "ConfigError",
    "Roster",
    "StreamboardError",
    "Streamer",
    "UpstreamError",
    "get_roster",
]
