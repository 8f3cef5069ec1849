from datetime import datetime

from pydantic import Field

from app.models.application import ApplicationStatus
from app.schemas.common import CamelModel, UserSummary


class ApplicationCreate(CamelModel):
    position: str = Field(min_length=1, max_length=100)
    experience: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    additional_info: str | None = None
    age: int | None = Field(default=None, ge=13, le=120)
    timezone: str | None = Field(default=None, max_length=50)
    languages: str | None = Field(default=None, max_length=200)
    availability_hours: int | None = Field(default=None, ge=0, le=168)


class ApplicationNotesUpdate(CamelModel):
    admin_notes: str | None = None


class ApplicationReview(CamelModel):
    # 승인/거절 시 메모를 함께 남길 수 있음 (생략 시 기존 메모 유지)
    admin_notes: str | None = None


class ApplicationResponse(CamelModel):
    id: int
    user_id: int
    position: str
    experience: str
    reason: str
    additional_info: str | None = None
    age: int | None = None
    timezone: str | None = None
    languages: str | None = None
    availability_hours: int | None = None
    status: ApplicationStatus
    admin_notes: str | None = None
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ApplicationDetail(ApplicationResponse):
    applicant: UserSummary | None = None
    reviewer: UserSummary | None = None
