"""
ticket.py

고객지원 티켓(Ticket) 및 답변(TicketReply) 모델 정의 파일.

티켓 상태 흐름:
- OPEN       → PROCESSING  (운영진 답변 또는 배정)
- OPEN       → CLOSED      (작성자 또는 운영진 종료)
- PROCESSING → CLOSED      (작성자 또는 운영진 종료)
- CLOSED 는 종료 상태: 답변 / 배정 불가

답변(TicketReply)은 추가만 가능한(append-only) 로그이며,
"OOO님이 티켓을 맡았습니다" 같은 시스템 메시지도 같은 테이블에 기록한다.

"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class TicketStatus(str, enum.Enum):
    OPEN = "open"
    PROCESSING = "processing"
    CLOSED = "closed"


class TicketDepartment(str, enum.Enum):
    ACCOUNT = "account"
    TECHNICAL = "technical"
    PAYMENT = "payment"
    RULES = "rules"
    SUGGESTION = "suggestion"
    OTHER = "other"


class TicketPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (
        Index("ix_tickets_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    department: Mapped[TicketDepartment] = mapped_column(
        SAEnum(TicketDepartment, name="ticket_department"), nullable=False, default=TicketDepartment.OTHER
    )
    priority: Mapped[TicketPriority] = mapped_column(
        SAEnum(TicketPriority, name="ticket_priority"), nullable=False, default=TicketPriority.MEDIUM
    )

    status: Mapped[TicketStatus] = mapped_column(
        SAEnum(TicketStatus, name="ticket_status"), nullable=False, default=TicketStatus.OPEN
    )
    assigned_to: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class TicketReply(Base):
    __tablename__ = "ticket_replies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_staff: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_system_message: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    attachments: Mapped[list | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
