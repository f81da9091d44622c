"""Data models for configured channels, the app token, Helix records and the roster."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, computed_field

PLAYER_URL = "https://player.twitch.tv/"
PREVIEW_URL = "https://static-cdn.jtvnw.net/previews-ttv/live_user_{channel}-854x480.jpg"


@dataclass(frozen=True)
class ChannelRequest:
    """A channel the page should show."""

    display_name: str
    channel_key: str

    def __post_init__(self) -> None:
        # Join key for both Helix lookups is always lowercase
        object.__setattr__(self, "channel_key", self.channel_key.strip().lower())


@dataclass(frozen=True)
class AccessToken:
    """App access token issued by the client-credentials grant."""

    token: str
    issued_at: float
    expires_in: int

    @property
    def expires_at(self) -> float:
        return self.issued_at + self.expires_in

    def is_fresh(self, now: float, margin: float) -> bool:
        """True while expiry minus *margin* is still in the future."""
        return self.expires_at - margin > now


@dataclass(frozen=True)
class UserMetadata:
    """Helix user record, keyed by lowercase login."""

    login: str
    avatar_url: str


@dataclass(frozen=True)
class StreamStatus:
    """Helix stream record; only present while the channel is live."""

    user_login: str
    title: str
    viewer_count: int


# ============================================
# Roster (serialized to the page)
# ============================================


class Streamer(BaseModel):
    display_name: str
    channel_key: str
    avatar_url: str
    is_live: bool
    viewer_count: int | None = None
    title: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def preview_url(self) -> str:
        return PREVIEW_URL.format(channel=self.channel_key)


class Roster(BaseModel):
    """Ordered streamers plus the address the player embed must name as parent."""

    base_addr: str
    streamers: list[Streamer]

    def embed_url(self, channel_key: str) -> str:
        return f"{PLAYER_URL}?channel={channel_key.lower()}&parent={self.base_addr}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def featured(self) -> str | None:
        """Channel featured on first load: the top entry, if it is live."""
        if self.streamers and self.streamers[0].is_live:
            return self.streamers[0].channel_key
        return None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def featured_embed_url(self) -> str | None:
        featured = self.featured
        return self.embed_url(featured) if featured else None
