"""
settings.py (models)

사이트 설정 / 사용자 설정 / 게임 서버 상태 캐시 모델.

설계 원칙:
- 관리자가 편집하는 사이트 설정(site_settings)과
  외부 상태 API의 마지막 응답 캐시(server_status_cache)를 서로 다른 테이블로 분리
  → 설정 화면에 내부 캐시 키가 노출되거나 실수로 덮어써지는 일이 없음
- 사용자별 화면 설정은 user_settings 에 (user_id, section) 단위로 저장

"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class SiteSetting(Base):
    __tablename__ = "site_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class UserSetting(Base):
    __tablename__ = "user_settings"
    __table_args__ = (
        UniqueConstraint("user_id", "section", name="uq_user_settings_user_section"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    section: Mapped[str] = mapped_column(String(30), nullable=False)  # appearance / server / integrations
    value: Mapped[dict] = mapped_column(JSON, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


# 마지막으로 성공한 게임 서버 상태 스냅샷 (항상 id=1 한 행만 사용)
class ServerStatusCache(Base):
    __tablename__ = "server_status_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


# 폴링 성공 시마다 남기는 표본 (관리자 대시보드 7일 차트용)
class ServerStatSample(Base):
    __tablename__ = "server_stat_samples"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    players: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_players: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
