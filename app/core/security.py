"""
security.py

비밀번호 해싱 및 JWT 토큰 생성/검증을 담당하는 보안 유틸리티 모음.

이 파일은 인증(auth) 로직에서 사용하는
저수준(low-level) 보안 기능만을 제공하며,
라우터나 비즈니스 로직은 포함하지 않는다.

주요 기능:
- 비밀번호 해싱 및 검증 (bcrypt)
- JWT Access Token 생성 / 디코딩 (principal 정보 포함)
- JWT Refresh Token 생성 / 디코딩

설계 원칙:
- Access Token과 Refresh Token을 명확히 분리 (시크릿도 분리)
- Refresh Token에 version(rtv)을 포함하여 강제 로그아웃/토큰 무효화 지원
- Access Token에는 username / role 을 함께 담지만,
  권한 판단은 항상 DB에서 다시 읽은 User 기준으로 수행 (deps.py)

관련 파일:
- app.core.config        : JWT 시크릿 키 및 만료 설정
- app.core.deps          : 토큰을 실제로 검증하는 인증 의존성
- app.routers.auth       : 로그인 / 재발급 / Discord 콜백

"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Literal

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


"""
비밀번호 검증 함수

- Discord 전용 계정은 password_hash 가 없으므로 항상 실패 처리

"""

def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def _create_token(*, subject: str, token_type: Literal["access", "refresh"],
                  expires_delta: timedelta, secret: str, extra: Optional[dict] = None) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {
        "sub": subject,
        "type": token_type,
        "exp": int(expire.timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, secret, algorithm=settings.ALGORITHM)


"""
Access Token 생성 함수

- subject: 사용자 id (문자열)
- username / role 을 클레임으로 포함 (프론트에서 principal 표시용)

"""

def create_access_token(subject: str, *, username: str | None = None, role: str | None = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    extra = {}
    if username is not None:
        extra["username"] = username
    if role is not None:
        extra["role"] = role
    return _create_token(
        subject=subject,
        token_type="access",
        expires_delta=expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        secret=settings.SECRET_KEY,
        extra=extra,
    )


def create_refresh_token(subject: str, refresh_token_version: int, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        subject=subject,
        token_type="refresh",
        expires_delta=expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        secret=settings.REFRESH_SECRET_KEY,
        extra={"rtv": refresh_token_version},
    )


"""
Access Token 디코딩

- access 타입이 아니면 JWTError
- sub(user id) 를 int 로 반환

"""

def decode_access_token(token: str) -> int:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Not an access token")
    sub = payload.get("sub")
    if not sub:
        raise JWTError("Missing subject")
    return int(sub)


"""
Refresh Token 디코딩 및 검증 함수

- 토큰 타입(refresh) 확인
- subject(user_id)와 rtv(version) 추출
- 유효하지 않을 경우 JWTError 발생

"""

def decode_refresh_token(token: str) -> tuple[int, int]:
    payload = jwt.decode(token, settings.REFRESH_SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "refresh":
        raise JWTError("Not a refresh token")
    sub = int(payload["sub"])
    rtv = int(payload.get("rtv", -1))
    return sub, rtv
