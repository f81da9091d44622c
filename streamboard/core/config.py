"""Application configuration using Pydantic Settings"""

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from streamboard.core.errors import ConfigError
from streamboard.models import ChannelRequest

logger = logging.getLogger(__name__)

# Helix users/streams accept at most this many logins per request
MAX_CHANNELS = 100

DEFAULT_CHANNELS = ",".join(
    [
        "Shokk:shokkfamedslayer",
        "Cuzdot:cuzdot",
        "Eden:edenwod",
        "Taco:tacokek",
        "TT:t_t_27",
        "Turbo:Turbogronil",
        "Anda:Andazara",
        "Tinky:tinky_lol",
        "Vaelin:vaelinhc",
        "Dife:zilakin",
        "Cruzz Croix V:cruzzxv",
        "Spanra:spannra",
    ]
)


def parse_channels(raw: str) -> list[ChannelRequest]:
    """Parse ``Display:login`` pairs separated by commas.

    An entry without ``:`` uses the login as its display name. Blank entries
    are skipped and a repeated channel key keeps its first entry. Entries past
    MAX_CHANNELS are dropped with a warning.
    """
    channels: list[ChannelRequest] = []
    seen: set[str] = set()
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        display_name, sep, login = entry.rpartition(":")
        if not sep:
            display_name = login
        display_name, login = display_name.strip(), login.strip()
        if not login:
            logger.warning(f"Ignoring channel entry without login: '{entry}'")
            continue
        channel = ChannelRequest(display_name=display_name or login, channel_key=login)
        if channel.channel_key in seen:
            logger.warning(f"Duplicate channel '{channel.channel_key}' ignored")
            continue
        seen.add(channel.channel_key)
        channels.append(channel)
    if len(channels) > MAX_CHANNELS:
        logger.warning(
            f"{len(channels)} channels configured, keeping the first {MAX_CHANNELS}"
        )
        del channels[MAX_CHANNELS:]
    return channels


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch app credentials (client-credentials grant)
    twitch_client_id: str = Field(default="", description="Twitch application Client ID")
    twitch_client_secret: str = Field(default="", description="Twitch application Client Secret")

    # Player embed parent
    base_addr: str = Field(default="127.0.0.1", description="Host the page is served from")

    # Roster
    channels: str = Field(default=DEFAULT_CHANNELS, description="Display:login pairs, comma separated")

    # Cache windows (seconds)
    users_cache_ttl: float = Field(default=36000, description="User metadata cache TTL")
    streams_cache_ttl: float = Field(default=300, description="Stream status cache TTL")
    token_refresh_margin: float = Field(
        default=86400, description="Refresh the app token this long before it expires"
    )

    # Upstream
    oauth_base: str = Field(default="https://id.twitch.tv/oauth2", description="OAuth base URL")
    helix_base: str = Field(default="https://api.twitch.tv/helix", description="Helix base URL")
    http_timeout: float = Field(default=10.0, description="Upstream request timeout in seconds")

    # Environment
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @field_validator("users_cache_ttl", "streams_cache_ttl", "token_refresh_margin")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @property
    def channel_requests(self) -> list[ChannelRequest]:
        """Configured channels, keys normalized to lowercase"""
        return parse_channels(self.channels)

    def current_base_addr(self) -> str:
        """BASE_ADDR as set right now; falls back to the value loaded at startup"""
        return os.getenv("BASE_ADDR") or self.base_addr

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment.lower() == "development"

    def require_credentials(self) -> tuple[str, str]:
        """Return (client_id, client_secret) or raise ConfigError."""
        if not self.twitch_client_id:
            raise ConfigError("Missing TWITCH_CLIENT_ID")
        if not self.twitch_client_secret:
            raise ConfigError("Missing TWITCH_CLIENT_SECRET")
        return self.twitch_client_id, self.twitch_client_secret


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
