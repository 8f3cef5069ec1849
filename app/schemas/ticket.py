from datetime import datetime

from pydantic import Field

from app.models.ticket import TicketDepartment, TicketPriority, TicketStatus
from app.schemas.common import CamelModel, UserSummary


class TicketCreate(CamelModel):
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    department: TicketDepartment = TicketDepartment.OTHER
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketReplyCreate(CamelModel):
    message: str = Field(min_length=1)
    attachments: list[str] | None = None


class TicketAssign(CamelModel):
    # 생략하면 요청한 운영진 본인에게 배정
    assignee_id: int | None = None


class TicketResponse(CamelModel):
    id: int
    user_id: int
    subject: str
    message: str
    department: TicketDepartment
    priority: TicketPriority
    status: TicketStatus
    assigned_to: int | None = None
    closed_at: datetime | None = None
    closed_by: int | None = None
    created_at: datetime
    updated_at: datetime


class TicketReplyResponse(CamelModel):
    id: int
    ticket_id: int
    user_id: int
    message: str
    is_staff: bool
    is_system_message: bool
    attachments: list[str] | None = None
    created_at: datetime
    author: UserSummary | None = None


class TicketDetail(TicketResponse):
    owner: UserSummary | None = None
    assignee: UserSummary | None = None
    replies: list[TicketReplyResponse] = []
