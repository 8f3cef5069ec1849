"""
admin_tickets.py

운영진(admin / moderator / support) 전용 티켓 관리 API 모음.

주요 기능:
- 전체 티켓 목록 (status=open|processing|closed|all, 페이지)
- 티켓 상세 (답변 스레드 포함)
- 배정 (본인 또는 지정한 운영진, PROCESSING 전이 + 시스템 메시지)
- 운영진 답변 (OPEN → PROCESSING, 미배정이면 답변자 배정)
- 종료
- CSV 내보내기

설계 원칙:
- 모든 엔드포인트는 운영진 권한(get_current_staff)을 요구
- 상태 전이는 service 계층(app.services.tickets)에 위임

"""

import csv
import io
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import desc, select
from sqlalchemy.orm import Session
from starlette.responses import StreamingResponse

from app.core.deps import get_db, get_current_staff
from app.models.ticket import Ticket, TicketStatus
from app.models.user import User
from app.routers.tickets import run_in_transaction, ticket_detail
from app.schemas.ticket import TicketAssign, TicketReplyCreate, TicketReplyResponse, TicketResponse
from app.services import tickets as service

router = APIRouter(prefix="/admin/tickets", tags=["admin-tickets"])

StatusFilter = Literal["open", "processing", "closed", "all"]


@router.get("")
def list_tickets(
    status_filter: StatusFilter = Query("all", alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    ticket_status = None if status_filter == "all" else TicketStatus(status_filter)
    rows = service.list_tickets(db, status=ticket_status, limit=limit, offset=offset)
    return {
        "items": [TicketResponse.model_validate(t) for t in rows],
        "meta": {"limit": limit, "offset": offset, "count": len(rows)},
    }


"""
    운영진용 티켓 목록 CSV 다운로드 API

    - status 필터는 목록 API 와 동일
    - UTF-8 BOM을 추가하여 Excel에서 깨지지 않도록 처리

"""
@router.get("/export")
def export_tickets_csv(
    status_filter: StatusFilter = Query("all", alias="status"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    stmt = (
        select(Ticket, User.username)
        .join(User, User.id == Ticket.user_id)
        .order_by(desc(Ticket.created_at), desc(Ticket.id))
    )
    if status_filter != "all":
        stmt = stmt.where(Ticket.status == TicketStatus(status_filter))
    rows = db.execute(stmt).all()

    def generate():
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow([
            "id", "username", "subject", "department", "priority", "status",
            "assigned_to", "created_at", "closed_at", "closed_by",
        ])
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for t, username in rows:
            writer.writerow([
                t.id,
                username,
                t.subject,
                t.department.value,
                t.priority.value,
                t.status.value,
                t.assigned_to or "",
                t.created_at.isoformat() if t.created_at else "",
                t.closed_at.isoformat() if t.closed_at else "",
                t.closed_by or "",
            ])
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    headers = {"Content-Disposition": f'attachment; filename="tickets_{status_filter}.csv"'}
    return StreamingResponse(generate(), media_type="text/csv; charset=utf-8", headers=headers)


@router.get("/{ticket_id}")
def get_ticket(
    ticket_id: int,
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    ticket = service.get_ticket_for(db, ticket_id=ticket_id, actor=staff)
    return {"ticket": ticket_detail(db, ticket)}


@router.patch("/{ticket_id}/assign")
def assign_ticket(
    ticket_id: int,
    body: TicketAssign | None = None,
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    ticket = run_in_transaction(
        db,
        lambda: service.assign_ticket(
            db, ticket_id=ticket_id, actor=staff, assignee_id=body.assignee_id if body else None
        ),
    )
    db.refresh(ticket)
    return {"success": True, "ticket": ticket_detail(db, ticket)}


@router.post("/{ticket_id}/reply", status_code=status.HTTP_201_CREATED)
def staff_reply(
    ticket_id: int,
    body: TicketReplyCreate,
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    reply = run_in_transaction(
        db,
        lambda: service.add_reply(
            db, ticket_id=ticket_id, actor=staff, message=body.message, attachments=body.attachments
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
    staff: User = Depends(get_current_staff),
):
    ticket = run_in_transaction(db, lambda: service.close_ticket(db, ticket_id=ticket_id, actor=staff))
    db.refresh(ticket)
    return {"success": True, "ticket": TicketResponse.model_validate(ticket)}
