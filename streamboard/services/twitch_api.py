"""Twitch Helix queries for the roster.

Both queries are batched: every configured login goes into one request as a
repeated query parameter. Results come back as mappings keyed by lowercase
login so they can be joined against the configured channel keys.
"""

import logging

import httpx
from pydantic import BaseModel, ValidationError

from streamboard.core.config import MAX_CHANNELS
from streamboard.core.errors import UpstreamError
from streamboard.models import AccessToken, StreamStatus, UserMetadata

logger = logging.getLogger(__name__)


# ============================================
# Helix payloads
# ============================================


class HelixUser(BaseModel):
    login: str
    profile_image_url: str


class HelixUsersResponse(BaseModel):
    data: list[HelixUser]


class HelixStream(BaseModel):
    user_login: str
    title: str
    viewer_count: int


class HelixStreamsResponse(BaseModel):
    data: list[HelixStream]


class HelixClient:
    """Typed access to the Helix ``users`` and ``streams`` endpoints."""

    def __init__(self, client_id: str, http: httpx.AsyncClient, helix_base: str):
        self.client_id = client_id
        self._http = http
        self._helix_base = helix_base.rstrip("/")

    def _app_headers(self, token: AccessToken) -> dict[str, str]:
        return {"Authorization": f"Bearer {token.token}", "Client-Id": self.client_id}

    async def _helix_get(
        self, path: str, params: dict[str, list[str]], token: AccessToken
    ) -> httpx.Response:
        # Helix rejects the whole request past 100 logins
        for name, values in params.items():
            if len(values) > MAX_CHANNELS:
                raise UpstreamError(
                    f"Helix /{path} accepts at most {MAX_CHANNELS} {name} values, got {len(values)}"
                )
        try:
            response = await self._http.get(
                f"{self._helix_base}/{path}",
                params=params,
                headers=self._app_headers(token),
            )
        except httpx.HTTPError as e:
            logger.error(f"Helix GET /{path} error: {type(e).__name__}: {e}")
            raise UpstreamError(f"Helix /{path} request failed: {type(e).__name__}") from e

        if response.status_code != 200:
            logger.error(f"Helix GET /{path} returned {response.status_code}")
            raise UpstreamError(f"Helix /{path} returned HTTP {response.status_code}")
        return response

    async def get_users(self, logins: list[str], token: AccessToken) -> dict[str, UserMetadata]:
        """Fetch user metadata for all *logins* in one request."""
        if not logins:
            return {}
        response = await self._helix_get("users", {"login": logins}, token)
        try:
            payload = HelixUsersResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected Helix /users payload: {e.error_count()} errors") from e

        users = {
            u.login.lower(): UserMetadata(login=u.login, avatar_url=u.profile_image_url)
            for u in payload.data
        }
        logger.debug(f"Fetched {len(users)}/{len(logins)} users")
        return users

    async def get_streams(self, logins: list[str], token: AccessToken) -> dict[str, StreamStatus]:
        """Fetch live streams for *logins* in one request; offline channels are absent."""
        if not logins:
            return {}
        response = await self._helix_get(
            "streams", {"user_login": logins, "first": [str(MAX_CHANNELS)]}, token
        )
        try:
            payload = HelixStreamsResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise UpstreamError(
                f"Unexpected Helix /streams payload: {e.error_count()} errors"
            ) from e

        streams = {
            s.user_login.lower(): StreamStatus(
                user_login=s.user_login, title=s.title, viewer_count=s.viewer_count
            )
            for s in payload.data
        }
        logger.debug(f"Fetched {len(streams)} live streams")
        return streams
