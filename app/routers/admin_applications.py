"""
admin_applications.py

관리자 전용 운영진 지원서 관리 API 모음.

주요 기능:
- 지원서 목록 (상태 필터 / 페이지) 및 최근 5건
- 지원서 상세 (지원자 / 검토자 요약 포함)
- 관리자 메모 수정
- 승인 (명단 생성 + 권한 승격) / 거절
- 관리자용 CSV / Excel(xlsx) 데이터 내보내기

설계 원칙:
- 모든 엔드포인트는 관리자 권한(get_current_admin)을 요구
- 상태 전이 규칙과 부수 효과는 service 계층(app.services.applications)에 위임
- 이 라우터는 트랜잭션 경계(commit/rollback)와 응답 형태만 담당

관련 파일:
- app.services.applications : 지원서 상태 전이 로직
- app.models.application    : StaffApplication 모델
- app.schemas.application   : 요청/응답 스키마

"""

import csv
import io
from starlette.responses import StreamingResponse, Response
from openpyxl import Workbook

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import select, desc

from app.core.deps import get_db, get_current_admin
from app.core.errors import DomainError
from app.models.application import ApplicationStatus, StaffApplication
from app.models.user import User
from app.schemas.application import (
    ApplicationDetail,
    ApplicationNotesUpdate,
    ApplicationResponse,
    ApplicationReview,
)
from app.schemas.common import UserSummary
from app.services import applications as service

router = APIRouter(prefix="/admin/applications", tags=["admin-applications"])

EXPORT_COLUMNS = [
    "id", "username", "position", "status", "age", "timezone", "languages",
    "availability_hours", "experience", "reason", "additional_info",
    "admin_notes", "reviewed_by", "reviewed_at", "created_at",
]


def _detail(db: Session, application: StaffApplication) -> ApplicationDetail:
    detail = ApplicationDetail.model_validate(application)
    applicant = db.get(User, application.user_id)
    reviewer = db.get(User, application.reviewed_by) if application.reviewed_by else None
    detail.applicant = UserSummary.model_validate(applicant) if applicant else None
    detail.reviewer = UserSummary.model_validate(reviewer) if reviewer else None
    return detail


@router.get("")
def list_applications(
    status: ApplicationStatus | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    rows = service.list_applications(db, status=status, limit=limit, offset=offset)
    return {
        "items": [ApplicationResponse.model_validate(a) for a in rows],
        "meta": {"limit": limit, "offset": offset, "count": len(rows)},
    }


# 대시보드용 최근 지원서 5건
@router.get("/recent")
def recent_applications(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    rows = service.list_applications(db, limit=5)
    return {"items": [_detail(db, a) for a in rows]}


"""
    관리자용 지원서 CSV 다운로드 API

    - status 를 지정하면 해당 상태만, 생략하면 전체
    - StreamingResponse를 사용해 대용량 데이터도 메모리 부담 없이 처리
    - UTF-8 BOM을 추가하여 Excel에서 깨지지 않도록 처리

"""
@router.get("/export")
def export_applications_csv(
    status: ApplicationStatus | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    rows = _export_rows(db, status)

    def generate():
        # Excel에서 UTF-8 CSV 깨짐 방지를 위해 BOM(Byte Order Mark) 먼저 출력
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(EXPORT_COLUMNS)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for row in rows:
            writer.writerow(row)
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    filename = f"applications_{status.value if status else 'all'}.csv"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(generate(), media_type="text/csv; charset=utf-8", headers=headers)


"""
관리자용 지원서 Excel(xlsx) 다운로드 API

- CSV 대신 Excel 형식이 필요한 경우를 위한 엔드포인트
- openpyxl을 사용하여 XLSX 파일 생성

"""

@router.get("/export.xlsx")
def export_applications_xlsx(
    status: ApplicationStatus | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    wb = Workbook()
    ws = wb.active
    ws.title = "applications"

    ws.append(EXPORT_COLUMNS)
    for row in _export_rows(db, status):
        ws.append(row)

    buf = io.BytesIO()
    wb.save(buf)

    filename = f"applications_{status.value if status else 'all'}.xlsx"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(
        content=buf.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )


def _export_rows(db: Session, status: ApplicationStatus | None) -> list[list]:
    stmt = (
        select(StaffApplication, User.username)
        .join(User, User.id == StaffApplication.user_id)
        .order_by(desc(StaffApplication.created_at), desc(StaffApplication.id))
    )
    if status is not None:
        stmt = stmt.where(StaffApplication.status == status)

    rows = []
    for a, username in db.execute(stmt).all():
        # 파일 포맷은 문자열 기반이므로 enum / datetime 은 문자열로 변환
        rows.append([
            a.id,
            username,
            a.position,
            a.status.value,
            a.age if a.age is not None else "",
            a.timezone or "",
            a.languages or "",
            a.availability_hours if a.availability_hours is not None else "",
            a.experience,
            a.reason,
            a.additional_info or "",
            a.admin_notes or "",
            a.reviewed_by or "",
            a.reviewed_at.isoformat() if a.reviewed_at else "",
            a.created_at.isoformat() if a.created_at else "",
        ])
    return rows


@router.get("/{application_id}")
def get_application(
    application_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    application = service.get_application(db, application_id)
    return {"application": _detail(db, application)}


@router.patch("/{application_id}/notes")
def update_application_notes(
    application_id: int,
    body: ApplicationNotesUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        application = service.update_notes(db, application_id=application_id, admin_notes=body.admin_notes)
        db.commit()
        db.refresh(application)
    except DomainError:
        db.rollback()
        raise

    return {"success": True, "application": ApplicationResponse.model_validate(application)}


"""
지원서 승인 API

- PENDING 지원서만 승인 가능 (이미 처리된 지원서면 400)
- 승인 / 명단 생성 / 권한 승격 / 관리자 로그가 한 번에 커밋되거나 전부 롤백
- 명단 unique 제약 충돌(동시 승인 등)은 전체 롤백 후 400

"""

@router.patch("/{application_id}/approve")
def approve_application(
    application_id: int,
    body: ApplicationReview | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    try:
        application = service.approve_application(
            db,
            application_id=application_id,
            reviewer=admin,
            admin_notes=body.admin_notes if body else None,
        )
        db.commit()
        db.refresh(application)
    except DomainError:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Approval conflicted with an existing staff entry")

    return {"success": True, "application": ApplicationResponse.model_validate(application)}


@router.patch("/{application_id}/reject")
def reject_application(
    application_id: int,
    body: ApplicationReview | None = None,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    try:
        application = service.reject_application(
            db,
            application_id=application_id,
            reviewer=admin,
            admin_notes=body.admin_notes if body else None,
        )
        db.commit()
        db.refresh(application)
    except DomainError:
        db.rollback()
        raise

    return {"success": True, "application": ApplicationResponse.model_validate(application)}
