"""
tickets.py

사용자용 고객지원 티켓 API.

- GET  /user/tickets               : 내 티켓 목록
- POST /user/tickets               : 티켓 생성 (OPEN)
- GET  /user/tickets/{id}          : 티켓 + 답변 스레드 (작성자 또는 운영진)
- POST /user/tickets/{id}/reply    : 답변 추가 (종료된 티켓은 400)
- POST /user/tickets/{id}/close    : 티켓 종료

"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user
from app.core.errors import DomainError
from app.models.ticket import Ticket
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.ticket import (
    TicketCreate,
    TicketDetail,
    TicketReplyCreate,
    TicketReplyResponse,
    TicketResponse,
)
from app.services import tickets as service

router = APIRouter(prefix="/user/tickets", tags=["tickets"])


def _summary(db: Session, user_id: int | None, cache: dict[int, UserSummary | None]) -> UserSummary | None:
    if user_id is None:
        return None
    if user_id not in cache:
        user = db.get(User, user_id)
        cache[user_id] = UserSummary.model_validate(user) if user else None
    return cache[user_id]


# 티켓 상세 응답 (작성자 / 담당자 / 답변 작성자 요약 포함)
def ticket_detail(db: Session, ticket: Ticket) -> TicketDetail:
    users: dict[int, UserSummary | None] = {}
    replies = []
    for reply in service.list_replies(db, ticket.id):
        item = TicketReplyResponse.model_validate(reply)
        item.author = _summary(db, reply.user_id, users)
        replies.append(item)

    detail = TicketDetail.model_validate(ticket)
    detail.owner = _summary(db, ticket.user_id, users)
    detail.assignee = _summary(db, ticket.assigned_to, users)
    detail.replies = replies
    return detail


def run_in_transaction(db: Session, action):
    try:
        result = action()
        db.commit()
    except DomainError:
        db.rollback()
        raise
    return result


@router.get("")
def my_tickets(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"items": [TicketResponse.model_validate(t) for t in service.list_user_tickets(db, user.id)]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_ticket(
    body: TicketCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ticket = run_in_transaction(db, lambda: service.create_ticket(db, user=user, data=body))
    db.refresh(ticket)
    return {"success": True, "ticket": TicketResponse.model_validate(ticket)}


@router.get("/{ticket_id}")
def get_ticket(
    ticket_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ticket = service.get_ticket_for(db, ticket_id=ticket_id, actor=user)
    return {"ticket": ticket_detail(db, ticket)}


@router.post("/{ticket_id}/reply", status_code=status.HTTP_201_CREATED)
def reply_to_ticket(
    ticket_id: int,
    body: TicketReplyCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    reply = run_in_transaction(
        db,
        lambda: service.add_reply(
            db, ticket_id=ticket_id, actor=user, message=body.message, attachments=body.attachments
        ),
    )
    db.refresh(reply)
    ticket = db.get(Ticket, ticket_id)
    return {
        "success": True,
        "reply": TicketReplyResponse.model_validate(reply),
        "ticket": TicketResponse.model_validate(ticket),
    }


@router.post("/{ticket_id}/close")
def close_ticket(
    ticket_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ticket = run_in_transaction(db, lambda: service.close_ticket(db, ticket_id=ticket_id, actor=user))
    db.refresh(ticket)
    return {"success": True, "ticket": TicketResponse.model_validate(ticket)}
