"""
user.py

사용자(User) 및 권한(Role) 모델 정의 파일.

이 파일은 포털 사용자의 기본 정보와
권한(Role), 로컬 / Discord 인증 정보를 관리한다.

모든 인증, 권한, 티켓, 지원서, 관리자 기능의 기준이 되는 핵심 모델이다.

"""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


"""
사용자 권한(Role) 정의

- USER       : 일반 사용자 (가입 / Discord 최초 로그인 시 기본값)
- SUPPORT    : 고객지원 담당 (티켓 처리 가능)
- MODERATOR  : 운영진 (지원서 승인 시 부여)
- ADMIN      : 관리자 (모든 관리 기능)

"""

class Role(str, enum.Enum):
    USER = "user"
    SUPPORT = "support"
    MODERATOR = "moderator"
    ADMIN = "admin"


# 모든 사용자의 티켓을 다룰 수 있는 권한 집합
PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.MODERATOR, Role.SUPPORT})


"""
사용자(User) 모델

- username 은 고유 식별자 (로그인 ID)
- password_hash / discord_id 중 최소 하나는 반드시 존재 (인증 수단)
- refresh_token_version 으로 강제 로그아웃 및 토큰 무효화 지원

"""

class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "password_hash IS NOT NULL OR discord_id IS NOT NULL",
            name="ck_users_has_credential",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    discord_id: Mapped[str | None] = mapped_column(String(32), unique=True, index=True, nullable=True)
    discord_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[Role] = mapped_column(SAEnum(Role, name="user_role"), nullable=False, default=Role.USER)

    refresh_token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def is_staff(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
