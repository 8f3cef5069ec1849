# tests/helpers.py
import uuid

from sqlalchemy.orm import Session

from app.core.security import create_access_token, get_password_hash
from app.models.user import Role, User

DEFAULT_PASSWORD = "Passw0rd!23"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_user_in_db(
    db: Session,
    *,
    username: str | None = None,
    password: str | None = DEFAULT_PASSWORD,
    role: Role = Role.USER,
    **extra,
) -> User:
    user = User(
        username=username or f"user_{uuid.uuid4().hex[:8]}",
        password_hash=get_password_hash(password) if password else None,
        role=role,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def token_for(user: User) -> str:
    return create_access_token(str(user.id), username=user.username, role=user.role.value)


def user_with_token(db: Session, role: Role = Role.USER, **kwargs) -> tuple[User, dict]:
    """
    DB 에 사용자를 만들고 (user, Authorization 헤더) 를 반환
    (로그인 API 를 거치지 않는 빠른 경로, 로그인 자체는 test_auth_flow 에서 검증)
    """
    user = create_user_in_db(db, role=role, **kwargs)
    return user, auth_header(token_for(user))


def login(client, username: str, password: str = DEFAULT_PASSWORD) -> str:
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["accessToken"]
