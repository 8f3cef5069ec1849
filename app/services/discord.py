"""
services/discord.py

Discord OAuth2 연동 서비스.

흐름:
1. authorize_url()           : 프론트가 이동할 Discord 인증 URL 생성
2. exchange_code(code)       : 콜백으로 받은 code → access_token 교환
3. fetch_identity(token)     : /users/@me 로 Discord 사용자 정보 조회
4. find_or_provision_user()  : discord_id 로 기존 사용자 찾기 / 없으면 USER 권한으로 생성

설계 원칙:
- Discord 는 불투명한 외부 서비스로 취급: 짧은 타임아웃, 재시도 없음
- 실패는 DiscordAuthError 하나로 통일 (라우터에서 프론트로 에러 표시와 함께 리다이렉트)
- httpx.Client 를 주입할 수 있게 하여 테스트에서 MockTransport 사용

"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.base import utcnow
from app.models.user import Role, User

logger = logging.getLogger(__name__)

DISCORD_AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
DISCORD_CDN = "https://cdn.discordapp.com"


class DiscordAuthError(Exception):
    pass


@dataclass
class DiscordIdentity:
    id: str
    username: str
    avatar: str | None


def authorize_url(state: str | None = None) -> str:
    params = {
        "client_id": settings.DISCORD_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": settings.DISCORD_REDIRECT_URI,
        "scope": settings.DISCORD_SCOPE,
    }
    if state:
        params["state"] = state
    return f"{DISCORD_AUTHORIZE_URL}?{urlencode(params)}"


def _client() -> httpx.Client:
    return httpx.Client(timeout=settings.OAUTH_TIMEOUT_SECONDS)


def exchange_code(code: str, *, client: httpx.Client | None = None) -> str:
    http = client or _client()
    try:
        response = http.post(
            f"{settings.DISCORD_API_BASE}/oauth2/token",
            data={
                "client_id": settings.DISCORD_CLIENT_ID,
                "client_secret": settings.DISCORD_CLIENT_SECRET,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": settings.DISCORD_REDIRECT_URI,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.HTTPError as e:
        logger.warning("Discord token exchange failed: %s", e)
        raise DiscordAuthError("Discord token exchange failed") from e
    finally:
        if client is None:
            http.close()

    if response.status_code != 200:
        logger.warning("Discord token exchange returned %s", response.status_code)
        raise DiscordAuthError("Discord token exchange failed")

    access_token = response.json().get("access_token")
    if not access_token:
        raise DiscordAuthError("Discord token exchange returned no access token")
    return access_token


"""
Discord 사용자 정보 → 포털 표시 이름 규칙

- 신규 사용자명(discriminator "0")은 username 그대로
- 구 사용자명은 "name#1234" 형태
- 아바타는 CDN URL 로 변환 (없으면 None)

"""

def _display_name(payload: dict) -> str:
    username = payload.get("username") or "discord-user"
    discriminator = payload.get("discriminator")
    if discriminator and discriminator != "0":
        return f"{username}#{discriminator}"
    return username


def _avatar_url(payload: dict) -> str | None:
    avatar = payload.get("avatar")
    if not avatar:
        return None
    return f"{DISCORD_CDN}/avatars/{payload['id']}/{avatar}.png"


def fetch_identity(access_token: str, *, client: httpx.Client | None = None) -> DiscordIdentity:
    http = client or _client()
    try:
        response = http.get(
            f"{settings.DISCORD_API_BASE}/users/@me",
            headers={"Authorization": f"Bearer {access_token}"},
        )
    except httpx.HTTPError as e:
        logger.warning("Discord identity fetch failed: %s", e)
        raise DiscordAuthError("Discord identity fetch failed") from e
    finally:
        if client is None:
            http.close()

    if response.status_code != 200:
        logger.warning("Discord identity fetch returned %s", response.status_code)
        raise DiscordAuthError("Discord identity fetch failed")

    payload = response.json()
    if not payload.get("id"):
        raise DiscordAuthError("Discord identity has no id")

    return DiscordIdentity(
        id=str(payload["id"]),
        username=_display_name(payload),
        avatar=_avatar_url(payload),
    )


def _available_username(db: Session, base: str) -> str:
    candidate = base[:100]
    suffix = 2
    while db.scalar(select(User.id).where(User.username == candidate)) is not None:
        tail = f"-{suffix}"
        candidate = f"{base[:100 - len(tail)]}{tail}"
        suffix += 1
    return candidate


"""
Discord 계정으로 로그인할 사용자 찾기 / 생성

- discord_id 로 연결된 사용자가 있으면 Discord 이름 / 아바타를 최신화
- 없으면 USER 권한의 신규 사용자 생성 (password_hash 없음)
- 사용자명이 이미 쓰이고 있으면 "-2", "-3" 접미사

"""

def find_or_provision_user(db: Session, identity: DiscordIdentity) -> User:
    user = db.scalar(select(User).where(User.discord_id == identity.id))
    now = utcnow()

    if user:
        user.discord_username = identity.username
        if identity.avatar:
            user.avatar = identity.avatar
        user.last_login = now
        db.flush()
        return user

    user = User(
        username=_available_username(db, identity.username),
        discord_id=identity.id,
        discord_username=identity.username,
        avatar=identity.avatar,
        role=Role.USER,
        last_login=now,
    )
    db.add(user)
    db.flush()
    logger.info("Provisioned user %s for discord id %s", user.id, identity.id)
    return user
