"""
application.py

운영진 지원서(StaffApplication) 모델 정의 파일.

상태 흐름:
- PENDING  → APPROVED  (관리자 승인, 종료 상태)
- PENDING  → REJECTED  (관리자 거절, 종료 상태)

설계 원칙:
- 한 사용자는 PENDING 지원서를 동시에 하나만 가질 수 있음
  (서비스 계층 검사 + partial unique index 로 이중 보장)
- 승인/거절 시 reviewed_by / reviewed_at 을 상태 변경과 함께 기록

"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class StaffApplication(Base):
    __tablename__ = "staff_applications"
    __table_args__ = (
        Index(
            "uq_staff_applications_user_pending",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
        Index("ix_staff_applications_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    position: Mapped[str] = mapped_column(String(100), nullable=False)
    experience: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    additional_info: Mapped[str | None] = mapped_column(Text, nullable=True)

    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    languages: Mapped[str | None] = mapped_column(String(200), nullable=True)
    availability_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[ApplicationStatus] = mapped_column(
        SAEnum(ApplicationStatus, name="application_status"),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    reviewed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
