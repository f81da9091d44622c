"""Error taxonomy for roster building"""


class StreamboardError(Exception):
    """Base class for all roster-building failures."""


class ConfigError(StreamboardError):
    """Credentials or other required settings are missing or invalid."""


class AuthError(StreamboardError):
    """The client-credentials token exchange failed."""


class UpstreamError(StreamboardError):
    """A Helix query failed (transport, status code, or payload shape)."""


class AggregationError(StreamboardError):
    """Raised by ``build_roster``; wraps the error that aborted the build.

    ``cause`` holds the original ``ConfigError``, ``AuthError`` or
    ``UpstreamError`` and is also chained as ``__cause__``.
    """

    def __init__(self, stage: str, cause: StreamboardError):
        super().__init__(f"Roster build failed at {stage}: {cause}")
        self.stage = stage
        self.cause = cause
