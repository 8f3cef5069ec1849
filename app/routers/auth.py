"""
auth.py

인증(Authentication) 및 계정 관리 API 모음.

이 파일은 회원 가입, 로그인, 토큰 재발급, 로그아웃, Discord OAuth 로그인과 같이
사용자 인증 흐름 전반을 담당한다.
JWT 기반 인증 방식을 사용하며, Access Token + Refresh Token 구조를 따른다.

주요 기능:
- 회원 가입 (username + password, 기본 권한 USER)
- 로그인 및 토큰 발급
- Refresh Token 기반 Access Token 재발급
- 로그아웃 (Refresh Token 무효화)
- 내 정보 조회 / 프로필 수정 (사용자명, 아바타, 비밀번호)
- Discord OAuth 로그인 (기존 계정 연결 또는 신규 계정 생성)

설계 원칙:
- Access Token은 Authorization Header로 전달
- Refresh Token은 HttpOnly Cookie로 관리
- Refresh Token Version을 이용해 강제 로그아웃 / 토큰 무효화 처리
- 고정 관리자 우회 로그인은 두지 않음 (scripts/create_admin.py 로 관리자 계정 생성)
- 두 인증 경로(로컬 / Discord)는 같은 principal 형태로 수렴

관련 파일:
- app.core.security        : 비밀번호 해시 / JWT 생성·검증
- app.core.deps            : 인증 의존성(get_current_user)
- app.services.discord     : Discord OAuth 호출 / 사용자 연결
- app.schemas.auth         : 인증 관련 요청/응답

"""

import logging
import secrets
from urllib.parse import urlencode

from jose import JWTError
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from fastapi.responses import RedirectResponse

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.deps import get_db, get_current_user
from app.core.config import settings
from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)
from app.db.base import utcnow
from app.models.user import User, Role
from app.schemas.auth import (
    RegisterRequest, LoginRequest, TokenResponse, Principal, ProfileUpdateRequest,
)
from app.services import discord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "refresh_token"
OAUTH_STATE_COOKIE_NAME = "discord_oauth_state"


def _set_refresh_cookie(response: Response, user: User) -> None:
    refresh = create_refresh_token(subject=str(user.id), refresh_token_version=user.refresh_token_version)
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh,
        httponly=True,
        secure=settings.COOKIE_SECURE,        # 로컬 False / HTTPS 운영 True
        samesite=settings.COOKIE_SAMESITE,    # "lax" 추천
        domain=settings.COOKIE_DOMAIN,        # 보통 None
        path="/",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path="/", domain=settings.COOKIE_DOMAIN)


def _issue_tokens(response: Response, user: User) -> TokenResponse:
    _set_refresh_cookie(response, user)
    access = create_access_token(str(user.id), username=user.username, role=user.role.value)
    return TokenResponse(access_token=access, user=Principal.model_validate(user))


"""
회원 가입 API

- username 기준으로 신규 회원 가입 (중복 불가)
- 가입 시 기본 권한은 USER
- 가입 즉시 로그인 상태가 되도록 토큰 발급

"""

@router.post("/register")
def register(data: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    exists = db.scalar(select(User.id).where(User.username == data.username))
    if exists:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")

    try:
        user = User(
            username=data.username,
            password_hash=get_password_hash(data.password),
            role=Role.USER,
            last_login=utcnow(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Username already taken")

    logger.info("Registered user %s (%s)", user.id, user.username)
    return _issue_tokens(response, user)


"""
로그인 API

- username / 비밀번호 인증
- Discord 전용 계정(비밀번호 없음)은 로컬 로그인 불가
- Access Token은 응답 바디로 반환
- Refresh Token은 HttpOnly Cookie로 설정

"""

@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):

    user = db.scalar(select(User).where(User.username == data.username))

    if not user or not verify_password(data.password, user.password_hash):
        logger.info("Failed login for username %r", data.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user.last_login = utcnow()
    db.commit()
    db.refresh(user)

    logger.info("User %s logged in", user.id)
    return _issue_tokens(response, user)

"""
Access Token 재발급 API

- Refresh Token 쿠키를 사용해 새로운 Access Token 발급
- Refresh Token Version이 일치하지 않으면 재발급 거부
- 재발급 시 Refresh Token을 회전(rotation)하여 보안 강화

"""

@router.post("/refresh")
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing refresh token")

    try:
        user_id, token_rtv = decode_refresh_token(token)
    except (JWTError, ValueError, KeyError):
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = db.get(User, user_id)
    if not user:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="User not found")

    if token_rtv != user.refresh_token_version:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Refresh token revoked")

    user.refresh_token_version += 1
    db.commit()
    db.refresh(user)

    return _issue_tokens(response, user)

"""
로그아웃 API

- Refresh Token Version 증가로 기존 토큰 무효화
- 클라이언트의 Refresh Token 쿠키 삭제

"""

@router.post("/logout", status_code=204)
def logout(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        user.refresh_token_version += 1
        db.commit()
    except Exception:
        db.rollback()
        raise

    response = Response(status_code=204)
    _clear_refresh_cookie(response)
    return response


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"user": Principal.model_validate(user)}


"""
프로필 수정 API

- 사용자명 / 아바타 변경
- 비밀번호 변경 시 현재 비밀번호 확인 필수 (Discord 전용 계정은 최초 설정 시 생략 가능)
- 비밀번호 변경 시 Refresh Token 무효화

"""

@router.patch("/profile")
def update_profile(
    data: ProfileUpdateRequest,
    response: Response,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not data.model_fields_set:
        raise HTTPException(status_code=400, detail="No changes provided")

    if data.username is not None and data.username != user.username:
        taken = db.scalar(select(User.id).where(User.username == data.username, User.id != user.id))
        if taken:
            raise HTTPException(status_code=400, detail="Username already taken")
        user.username = data.username

    if "avatar" in data.model_fields_set:
        user.avatar = data.avatar

    password_changed = False
    if data.new_password is not None:
        if user.password_hash and not verify_password(data.current_password or "", user.password_hash):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
        user.password_hash = get_password_hash(data.new_password)
        user.refresh_token_version += 1
        password_changed = True

    try:
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Username already taken")

    # 비밀번호를 바꿨으면 기존 refresh 쿠키는 무효 → 다시 로그인
    if password_changed:
        _clear_refresh_cookie(response)

    return {"success": True, "user": Principal.model_validate(user)}


"""
Discord 인증 URL 발급 API

- CSRF 방지용 state 를 생성하여 HttpOnly 쿠키에 저장
- 프론트는 응답의 url 로 이동

"""

@router.get("/discord/url")
def discord_url(response: Response):
    if not settings.discord_enabled:
        raise HTTPException(status_code=503, detail="Discord login is not configured")

    state = secrets.token_urlsafe(24)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE_NAME,
        value=state,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        domain=settings.COOKIE_DOMAIN,
        path="/",
        max_age=600,
    )
    return {"url": discord.authorize_url(state)}


def _safe_redirect_path(path: str | None) -> str:
    # 외부 사이트로의 오픈 리다이렉트 방지: 같은 프론트 내부 경로만 허용
    if not path or not path.startswith("/") or path.startswith("//"):
        return "/"
    return path


def _frontend_redirect(path: str, **params) -> RedirectResponse:
    url = f"{settings.FRONTEND_URL.rstrip('/')}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


"""
Discord OAuth 콜백 API

- code → access_token 교환 → /users/@me 조회 (짧은 타임아웃, 재시도 없음)
- discord_id 로 기존 사용자를 찾거나 USER 권한으로 신규 생성
- Refresh Token 쿠키를 설정하고 프론트로 리다이렉트
  (프론트는 /auth/refresh 로 access token 을 받아감)
- 실패 시 프론트 로그인 페이지로 error=discord 와 함께 리다이렉트

"""

@router.get("/discord/callback")
def discord_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    redirect_to: str | None = None,
    db: Session = Depends(get_db),
):
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE_NAME)

    if error or not code:
        logger.info("Discord callback without code (error=%s)", error)
        return _frontend_redirect("/login", error="discord")

    if not expected_state or not state or not secrets.compare_digest(state, expected_state):
        logger.warning("Discord callback state mismatch")
        return _frontend_redirect("/login", error="discord_state")

    try:
        access_token = discord.exchange_code(code)
        identity = discord.fetch_identity(access_token)
        user = discord.find_or_provision_user(db, identity)
        db.commit()
        db.refresh(user)
    except discord.DiscordAuthError:
        db.rollback()
        return _frontend_redirect("/login", error="discord")
    except IntegrityError:
        db.rollback()
        logger.warning("Discord provisioning conflict for discord id")
        return _frontend_redirect("/login", error="discord")

    logger.info("User %s logged in with Discord", user.id)
    redirect = _frontend_redirect(_safe_redirect_path(redirect_to))
    _set_refresh_cookie(redirect, user)
    redirect.delete_cookie(key=OAUTH_STATE_COOKIE_NAME, path="/", domain=settings.COOKIE_DOMAIN)
    return redirect
