"""Shared fixtures: settings, a controllable clock, and a fake Twitch upstream."""

import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from streamboard.cache import AsyncTTLCache
from streamboard.core.config import Settings
from streamboard.services import CredentialStore, HelixClient, RosterService


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTwitch:
    """Serves /oauth2/token, /helix/users and /helix/streams and counts calls."""

    def __init__(self):
        self.users = {
            "a": "https://cdn.example/a.png",
            "b": "https://cdn.example/b.png",
        }
        self.streams: dict[str, tuple[str, int]] = {"a": ("Playing things", 50)}
        self.expires_in = 5_000_000
        self.calls: dict[str, int] = {"token": 0, "users": 0, "streams": 0}
        self.fail: set[str] = set()
        self.delay = 0.0
        self.last_request: dict[str, httpx.Request] = {}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        kind = path.rsplit("/", 1)[-1]
        self.calls[kind] = self.calls.get(kind, 0) + 1
        self.last_request[kind] = request
        if self.delay:
            await asyncio.sleep(self.delay)
        if kind in self.fail:
            return httpx.Response(500, json={"message": "boom"})

        if kind == "token":
            return httpx.Response(
                200,
                json={
                    "access_token": f"tok-{self.calls['token']}",
                    "expires_in": self.expires_in,
                    "token_type": "bearer",
                },
            )
        if kind == "users":
            logins = request.url.params.get_list("login")
            data = [
                {"id": str(i), "login": login, "profile_image_url": self.users[login.lower()]}
                for i, login in enumerate(logins)
                if login.lower() in self.users
            ]
            return httpx.Response(200, json={"data": data})
        if kind == "streams":
            logins = request.url.params.get_list("user_login")
            data = [
                {
                    "user_login": login,
                    "title": self.streams[login.lower()][0],
                    "viewer_count": self.streams[login.lower()][1],
                    "game_name": "",
                }
                for login in logins
                if login.lower() in self.streams
            ]
            # Helix pages /streams at 20 entries unless `first` asks for more
            data = data[: int(request.url.params.get("first", "20"))]
            return httpx.Response(200, content=json.dumps({"data": data, "pagination": {}}))
        return httpx.Response(404)


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.delenv("BASE_ADDR", raising=False)
    return Settings(
        _env_file=None,
        twitch_client_id="client-id",
        twitch_client_secret="client-secret",
        base_addr="example.org",
        channels="A:a,B:b",
        oauth_base="https://id.test/oauth2",
        helix_base="https://api.test/helix",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def twitch() -> FakeTwitch:
    return FakeTwitch()


@pytest_asyncio.fixture
async def http(twitch: FakeTwitch):
    client = httpx.AsyncClient(transport=httpx.MockTransport(twitch.handler))
    yield client
    await client.aclose()


@pytest.fixture
def credentials(settings: Settings, http: httpx.AsyncClient, clock: FakeClock) -> CredentialStore:
    return CredentialStore(settings, http, clock=clock)


@pytest.fixture
def helix(settings: Settings, http: httpx.AsyncClient) -> HelixClient:
    return HelixClient(settings.twitch_client_id, http, settings.helix_base)


@pytest.fixture
def roster_service(
    settings: Settings, credentials: CredentialStore, helix: HelixClient, clock: FakeClock
) -> RosterService:
    return RosterService(
        settings,
        credentials,
        helix,
        AsyncTTLCache("users", settings.users_cache_ttl, timer=clock),
        AsyncTTLCache("streams", settings.streams_cache_ttl, timer=clock),
    )
