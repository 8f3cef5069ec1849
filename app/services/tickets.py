"""
services/tickets.py

고객지원 티켓(Ticket) 도메인의 비즈니스 로직 모음.

상태 흐름:
- OPEN       → PROCESSING  : 운영진 답변 / 배정 시 자동 전이
- OPEN|PROCESSING → CLOSED : 작성자 또는 운영진이 종료
- CLOSED 는 종료 상태 (답변 / 배정 / 재종료 불가)

권한 규칙:
- 조회 / 답변 / 종료: 작성자 본인 또는 운영진(admin / moderator / support)
- 배정: 운영진만 (라우터에서 get_current_staff 로 제한)

설계 원칙:
- 상태 전이는 조건부 UPDATE("WHERE status = ...")로 수행, rowcount 로 성공 여부 판단
- 답변 추가 시 티켓 row 를 잠가(SELECT ... FOR UPDATE) 종료와 경합하지 않게 함
  (SQLite 는 FOR UPDATE 를 무시하지만 단일 writer 라 문제 없음)
- 운영진 답변 → PROCESSING 전이 / 미배정이면 답변자 배정까지 답변 생성과 같은 트랜잭션

관련 파일:
- app.models.ticket          : Ticket / TicketReply 모델
- app.routers.tickets        : 사용자 티켓 API
- app.routers.admin_tickets  : 운영진 티켓 API

"""

import logging

from sqlalchemy import desc, select, update
from sqlalchemy.orm import Session

from app.core.errors import InvalidTransition, NotFound, PermissionDenied, ValidationFailed
from app.db.base import utcnow
from app.models.admin_log import AdminAction
from app.models.ticket import Ticket, TicketReply, TicketStatus
from app.models.user import User
from app.schemas.ticket import TicketCreate
from app.services.admin_log import write_admin_log

logger = logging.getLogger(__name__)

ASSUMED_MESSAGE = "{name} assumed this ticket and is working on it."


def can_access(ticket: Ticket, actor: User) -> bool:
    return ticket.user_id == actor.id or actor.is_staff


def create_ticket(db: Session, *, user: User, data: TicketCreate) -> Ticket:
    ticket = Ticket(
        user_id=user.id,
        subject=data.subject,
        message=data.message,
        department=data.department,
        priority=data.priority,
        status=TicketStatus.OPEN,
    )
    db.add(ticket)
    db.flush()
    logger.info("Ticket %s opened by user %s", ticket.id, user.id)
    return ticket


def list_user_tickets(db: Session, user_id: int) -> list[Ticket]:
    return list(
        db.scalars(
            select(Ticket)
            .where(Ticket.user_id == user_id)
            .order_by(desc(Ticket.created_at), desc(Ticket.id))
        )
    )


def list_tickets(
    db: Session,
    *,
    status: TicketStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Ticket]:
    stmt = select(Ticket)
    if status is not None:
        stmt = stmt.where(Ticket.status == status)
    stmt = stmt.order_by(desc(Ticket.created_at), desc(Ticket.id)).limit(limit).offset(offset)
    return list(db.scalars(stmt))


def _load(db: Session, ticket_id: int, *, lock: bool = False) -> Ticket:
    stmt = select(Ticket).where(Ticket.id == ticket_id)
    if lock:
        stmt = stmt.with_for_update()
    ticket = db.scalar(stmt)
    if not ticket:
        raise NotFound("Ticket not found")
    return ticket


"""
티켓 조회 (권한 검사 포함)

- 작성자 또는 운영진만 조회 가능, 그 외 PermissionDenied
- 종료된 티켓도 같은 규칙으로 조회 허용 (읽기는 상태와 무관)

"""

def get_ticket_for(db: Session, *, ticket_id: int, actor: User) -> Ticket:
    ticket = _load(db, ticket_id)
    if not can_access(ticket, actor):
        raise PermissionDenied("You do not have access to this ticket")
    return ticket


def list_replies(db: Session, ticket_id: int) -> list[TicketReply]:
    return list(
        db.scalars(
            select(TicketReply)
            .where(TicketReply.ticket_id == ticket_id)
            .order_by(TicketReply.created_at, TicketReply.id)
        )
    )


"""
티켓 답변 추가

- 작성자 또는 운영진만 가능
- CLOSED 티켓에는 답변 불가 (InvalidTransition)
- 운영진 답변이면:
    OPEN → PROCESSING 조건부 전이
    담당자가 없으면 답변자를 담당자로 지정

"""

def add_reply(
    db: Session,
    *,
    ticket_id: int,
    actor: User,
    message: str,
    attachments: list[str] | None = None,
) -> TicketReply:
    ticket = _load(db, ticket_id, lock=True)
    if not can_access(ticket, actor):
        raise PermissionDenied("You do not have access to this ticket")
    if ticket.status == TicketStatus.CLOSED:
        raise InvalidTransition("Ticket is closed")

    staff_reply = actor.is_staff
    reply = TicketReply(
        ticket_id=ticket.id,
        user_id=actor.id,
        message=message,
        is_staff=staff_reply,
        is_system_message=False,
        attachments=attachments or None,
    )
    db.add(reply)

    now = utcnow()
    if staff_reply:
        db.execute(
            update(Ticket)
            .where(Ticket.id == ticket.id, Ticket.status == TicketStatus.OPEN)
            .values(status=TicketStatus.PROCESSING, updated_at=now)
        )
        db.execute(
            update(Ticket)
            .where(Ticket.id == ticket.id, Ticket.assigned_to.is_(None))
            .values(assigned_to=actor.id, updated_at=now)
        )
    else:
        ticket.updated_at = now

    db.flush()
    db.refresh(ticket)
    logger.info("Reply added to ticket %s by user %s (staff=%s)", ticket.id, actor.id, staff_reply)
    return reply


"""
티켓 배정

- assignee_id 생략 시 요청한 운영진 본인에게 배정
- 배정 대상은 운영진 권한이어야 함
- CLOSED 티켓은 배정 불가
- 배정과 함께 상태는 PROCESSING 으로 강제
- "OOO assumed this ticket ..." 시스템 메시지 추가 + 관리자 로그

"""

def assign_ticket(
    db: Session,
    *,
    ticket_id: int,
    actor: User,
    assignee_id: int | None = None,
) -> Ticket:
    ticket = _load(db, ticket_id, lock=True)

    assignee = actor
    if assignee_id is not None and assignee_id != actor.id:
        assignee = db.get(User, assignee_id)
        if not assignee:
            raise NotFound("Assignee not found")
        if not assignee.is_staff:
            raise ValidationFailed("Tickets can only be assigned to staff members")

    before = ticket.status
    result = db.execute(
        update(Ticket)
        .where(Ticket.id == ticket.id, Ticket.status != TicketStatus.CLOSED)
        .values(assigned_to=assignee.id, status=TicketStatus.PROCESSING, updated_at=utcnow())
    )
    if result.rowcount != 1:
        raise InvalidTransition("Cannot assign a closed ticket")

    db.add(
        TicketReply(
            ticket_id=ticket.id,
            user_id=actor.id,
            message=ASSUMED_MESSAGE.format(name=assignee.discord_username or assignee.username),
            is_staff=True,
            is_system_message=True,
        )
    )
    write_admin_log(
        db,
        actor_id=actor.id,
        action=AdminAction.ASSIGN_TICKET,
        target_type="ticket",
        target_id=ticket.id,
        before=before.value,
        after=f"assigned:{assignee.id}",
    )
    db.flush()
    db.refresh(ticket)
    logger.info("Ticket %s assigned to %s by %s", ticket.id, assignee.id, actor.id)
    return ticket


"""
티켓 종료

- 작성자 또는 운영진만 가능
- 이미 CLOSED 이면 InvalidTransition
- closed_at / closed_by 를 상태 변경과 같은 UPDATE 로 기록
- 운영진이 종료한 경우 관리자 로그 기록

"""

def close_ticket(db: Session, *, ticket_id: int, actor: User) -> Ticket:
    ticket = _load(db, ticket_id)
    if not can_access(ticket, actor):
        raise PermissionDenied("You do not have access to this ticket")

    before = ticket.status
    now = utcnow()
    result = db.execute(
        update(Ticket)
        .where(Ticket.id == ticket.id, Ticket.status != TicketStatus.CLOSED)
        .values(status=TicketStatus.CLOSED, closed_at=now, closed_by=actor.id, updated_at=now)
    )
    if result.rowcount != 1:
        raise InvalidTransition("Ticket is already closed")

    if actor.is_staff:
        write_admin_log(
            db,
            actor_id=actor.id,
            action=AdminAction.CLOSE_TICKET,
            target_type="ticket",
            target_id=ticket.id,
            before=before.value,
            after=TicketStatus.CLOSED.value,
        )
    db.flush()
    db.refresh(ticket)
    logger.info("Ticket %s closed by %s", ticket.id, actor.id)
    return ticket
