"""
deps.py

FastAPI 의존성(Dependency) 모음.

- get_db              : 요청 단위 DB 세션
- get_current_user    : Bearer Access Token → User (인증 필수)
- get_current_staff   : admin / moderator / support
- get_current_admin   : admin

권한 판단은 토큰 클레임이 아니라 항상 DB 에서 다시 읽은 User.role 기준.

"""

from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.models.user import User, Role, PRIVILEGED_ROLES

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(token: str, db: Session) -> User:
    try:
        user_id = decode_access_token(token)
    except (JWTError, ValueError):
        raise _credentials_error("Could not validate credentials")

    user = db.get(User, user_id)
    if not user:
        raise _credentials_error("User not found")
    return user


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise _credentials_error("Not authenticated")
    return _user_from_token(cred.credentials, db)


def require_roles(allowed: frozenset[Role], detail: str):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user
    return _checker

get_current_staff = require_roles(PRIVILEGED_ROLES, "Staff access required")
get_current_admin = require_roles(frozenset({Role.ADMIN}), "Admin access required")
