"""App access token cache (client-credentials grant).

Holds a single token slot. Refreshes happen under one lock, so concurrent
callers that find the slot empty or near expiry trigger exactly one token
request between them.
"""

import asyncio
import logging
import time
from collections.abc import Callable

import httpx

from streamboard.core.config import Settings
from streamboard.core.errors import AuthError
from streamboard.models import AccessToken

logger = logging.getLogger(__name__)


class CredentialStore:
    """Owns the app access token: fetch, cache, expiry check, refresh."""

    def __init__(
        self,
        settings: Settings,
        http: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._settings = settings
        self._http = http
        self._clock = clock
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> AccessToken | None:
        return self._token

    def _fresh_token(self) -> AccessToken | None:
        token = self._token
        if token and token.is_fresh(self._clock(), self._settings.token_refresh_margin):
            return token
        return None

    async def get_valid_token(self) -> AccessToken:
        """Return a token that will not expire within the refresh margin.

        Raises ConfigError when credentials are not configured (before any
        network access) and AuthError when the exchange fails. On failure
        the previously cached token, if any, is left in place.
        """
        token = self._fresh_token()
        if token:
            return token

        async with self._lock:
            # Double-check after acquiring lock
            token = self._fresh_token()
            if token:
                logger.debug("App token refreshed by a concurrent caller")
                return token

            client_id, client_secret = self._settings.require_credentials()
            token = await self._request_token(client_id, client_secret)
            self._token = token
            logger.info(f"App access token refreshed (expires in {token.expires_in}s)")
            return token

    async def _request_token(self, client_id: str, client_secret: str) -> AccessToken:
        issued_at = self._clock()
        try:
            response = await self._http.post(
                f"{self._settings.oauth_base}/token",
                data={
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Token request failed: {type(e).__name__}: {e}")
            raise AuthError(f"Token request failed: {type(e).__name__}") from e

        if response.status_code != 200:
            logger.error(f"Failed to get app token: {response.status_code}")
            raise AuthError(f"Token endpoint returned HTTP {response.status_code}")

        try:
            data = response.json()
            access_token = data["access_token"]
            expires_in = int(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed token response: {e}")
            raise AuthError("Malformed token response") from e

        if not isinstance(access_token, str) or not access_token:
            raise AuthError("No access_token in token response")

        return AccessToken(token=access_token, issued_at=issued_at, expires_in=expires_in)
