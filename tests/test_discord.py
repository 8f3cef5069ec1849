"""
Discord OAuth 로그인 테스트.
- Discord API 는 httpx.MockTransport 또는 monkeypatch 로 대체
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.core.config import settings
from app.models.user import Role
from app.services import discord
from app.services.discord import DiscordAuthError, DiscordIdentity
from tests.helpers import create_user_in_db


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_exchange_code_posts_form():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"access_token": "discord-token", "token_type": "Bearer"})

    with _client(handler) as client:
        token = discord.exchange_code("the-code", client=client)

    assert token == "discord-token"
    assert seen["path"] == "/api/oauth2/token"
    assert seen["form"]["code"] == ["the-code"]
    assert seen["form"]["grant_type"] == ["authorization_code"]
    assert seen["form"]["client_id"] == [settings.DISCORD_CLIENT_ID]


def test_exchange_code_failures():
    with _client(lambda request: httpx.Response(400, json={"error": "invalid_grant"})) as client:
        with pytest.raises(DiscordAuthError):
            discord.exchange_code("bad", client=client)

    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(timeout) as client:
        with pytest.raises(DiscordAuthError):
            discord.exchange_code("slow", client=client)


@pytest.mark.parametrize(
    "payload, username, avatar",
    [
        ({"id": "1", "username": "newstyle", "discriminator": "0", "avatar": None}, "newstyle", None),
        (
            {"id": "2", "username": "legacy", "discriminator": "1234", "avatar": "abc"},
            "legacy#1234",
            "https://cdn.discordapp.com/avatars/2/abc.png",
        ),
    ],
)
def test_fetch_identity(payload, username, avatar):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.url.path == "/api/users/@me"
        return httpx.Response(200, json=payload)

    with _client(handler) as client:
        identity = discord.fetch_identity("tok", client=client)

    assert identity == DiscordIdentity(id=payload["id"], username=username, avatar=avatar)


def test_find_or_provision_user(db):
    create_user_in_db(db, username="gamer")

    created = discord.find_or_provision_user(db, DiscordIdentity(id="555", username="gamer", avatar=None))
    db.commit()
    assert created.username == "gamer-2"
    assert created.role == Role.USER
    assert created.password_hash is None
    assert created.last_login is not None

    again = discord.find_or_provision_user(
        db, DiscordIdentity(id="555", username="gamer_renamed", avatar="https://cdn/x.png")
    )
    db.commit()
    assert again.id == created.id
    assert again.username == "gamer-2"
    assert again.discord_username == "gamer_renamed"
    assert again.avatar == "https://cdn/x.png"


def _start_login(client) -> str:
    r = client.get("/api/auth/discord/url")
    assert r.status_code == 200, r.text
    url = r.json()["url"]
    query = parse_qs(urlparse(url).query)
    assert query["client_id"] == [settings.DISCORD_CLIENT_ID]
    return query["state"][0]


@pytest.fixture()
def fake_discord(monkeypatch):
    monkeypatch.setattr(discord, "exchange_code", lambda code, **kwargs: f"token-for-{code}")
    monkeypatch.setattr(
        discord,
        "fetch_identity",
        lambda token, **kwargs: DiscordIdentity(id="777", username="discorder", avatar=None),
    )


def test_callback_logs_in_and_redirects(client, fake_discord):
    state = _start_login(client)

    r = client.get(
        "/api/auth/discord/callback",
        params={"code": "abc", "state": state, "redirect_to": "/dashboard"},
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "http://localhost:5173/dashboard"

    # 콜백에서 받은 refresh 쿠키로 access token 발급
    refreshed = client.post("/api/auth/refresh")
    assert refreshed.status_code == 200, refreshed.text
    user = refreshed.json()["user"]
    assert user["discordId"] == "777"
    assert user["username"] == "discorder"
    assert user["role"] == "user"


def test_callback_rejects_state_mismatch(client, fake_discord):
    _start_login(client)

    r = client.get(
        "/api/auth/discord/callback",
        params={"code": "abc", "state": "forged"},
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "http://localhost:5173/login?error=discord_state"


def test_callback_error_and_open_redirect(client, fake_discord, monkeypatch):
    state = _start_login(client)

    denied = client.get("/api/auth/discord/callback", params={"error": "access_denied"}, follow_redirects=False)
    assert denied.headers["location"] == "http://localhost:5173/login?error=discord"

    ok = client.get(
        "/api/auth/discord/callback",
        params={"code": "abc", "state": state, "redirect_to": "//evil.example"},
        follow_redirects=False,
    )
    assert ok.headers["location"] == "http://localhost:5173/"

    def fail(code, **kwargs):
        raise DiscordAuthError("Discord token exchange failed")

    monkeypatch.setattr(discord, "exchange_code", fail)
    state = _start_login(client)
    failed = client.get(
        "/api/auth/discord/callback",
        params={"code": "abc", "state": state},
        follow_redirects=False,
    )
    assert failed.headers["location"] == "http://localhost:5173/login?error=discord"
