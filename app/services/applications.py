"""
services/applications.py

운영진 지원서(StaffApplication) 도메인의 비즈니스 로직 모음.

주요 기능:
- 지원서 제출 (사용자당 PENDING 지원서 1건 제한)
- 관리자 메모 수정
- 승인 / 거절 (PENDING 에서만 가능, 종료 상태)
- 승인 시 운영진 명단(StaffMember) 생성 + 권한 USER → MODERATOR 승격

설계 원칙:
- 상태 전이는 "WHERE status = PENDING" 조건부 UPDATE 로 수행
  → 동시에 두 번 승인 요청이 와도 한 쪽만 rowcount=1 을 얻음
- 승인 / 명단 생성 / 권한 승격 / 관리자 로그는 하나의 트랜잭션
  (서비스는 flush 만, commit/rollback 은 라우터에서)
- 명단 중복은 staff_members.user_id unique 제약으로 한 번 더 막음

관련 파일:
- app.models.application        : StaffApplication 모델
- app.models.staff              : StaffMember 모델
- app.routers.applications      : 사용자 지원서 API
- app.routers.admin_applications: 관리자 지원서 API

"""

import logging

from sqlalchemy import desc, select, update
from sqlalchemy.orm import Session

from app.core.errors import InvalidTransition, NotFound, ValidationFailed
from app.db.base import utcnow
from app.models.admin_log import AdminAction
from app.models.application import ApplicationStatus, StaffApplication
from app.models.staff import StaffMember
from app.models.user import Role, User
from app.schemas.application import ApplicationCreate
from app.services.admin_log import write_admin_log

logger = logging.getLogger(__name__)

PENDING_EXISTS_MESSAGE = "A pending application exists for this user"
ROSTER_ROLE = "moderator"


def has_pending_application(db: Session, user_id: int) -> bool:
    return db.scalar(
        select(StaffApplication.id)
        .where(
            StaffApplication.user_id == user_id,
            StaffApplication.status == ApplicationStatus.PENDING,
        )
        .limit(1)
    ) is not None


"""
지원서 제출

- 이미 PENDING 지원서가 있으면 ValidationFailed
- 동시에 두 건이 들어와 검사를 통과해도
  partial unique index(uq_staff_applications_user_pending)에서 IntegrityError 발생
  → 라우터에서 같은 메시지의 400 으로 변환

"""

def submit_application(db: Session, *, user: User, data: ApplicationCreate) -> StaffApplication:
    if has_pending_application(db, user.id):
        raise ValidationFailed(PENDING_EXISTS_MESSAGE)

    application = StaffApplication(
        user_id=user.id,
        status=ApplicationStatus.PENDING,
        **data.model_dump(),
    )
    db.add(application)
    db.flush()
    logger.info("Application %s submitted by user %s", application.id, user.id)
    return application


def find_roster_entry(db: Session, user_id: int) -> StaffMember | None:
    return db.scalar(select(StaffMember).where(StaffMember.user_id == user_id))


def list_user_applications(db: Session, user_id: int) -> list[StaffApplication]:
    return list(
        db.scalars(
            select(StaffApplication)
            .where(StaffApplication.user_id == user_id)
            .order_by(desc(StaffApplication.created_at), desc(StaffApplication.id))
        )
    )


def list_applications(
    db: Session,
    *,
    status: ApplicationStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[StaffApplication]:
    stmt = select(StaffApplication)
    if status is not None:
        stmt = stmt.where(StaffApplication.status == status)
    stmt = stmt.order_by(desc(StaffApplication.created_at), desc(StaffApplication.id))
    return list(db.scalars(stmt.limit(limit).offset(offset)))


def get_application(db: Session, application_id: int) -> StaffApplication:
    application = db.get(StaffApplication, application_id)
    if not application:
        raise NotFound("Application not found")
    return application


# 관리자 메모는 상태와 무관하게 언제든 수정 가능
def update_notes(db: Session, *, application_id: int, admin_notes: str | None) -> StaffApplication:
    application = get_application(db, application_id)
    application.admin_notes = admin_notes
    db.flush()
    return application


def _review(
    db: Session,
    *,
    application: StaffApplication,
    reviewer: User,
    status: ApplicationStatus,
    admin_notes: str | None,
) -> None:
    now = utcnow()
    values = {
        "status": status,
        "reviewed_by": reviewer.id,
        "reviewed_at": now,
        "updated_at": now,
    }
    if admin_notes is not None:
        values["admin_notes"] = admin_notes

    result = db.execute(
        update(StaffApplication)
        .where(
            StaffApplication.id == application.id,
            StaffApplication.status == ApplicationStatus.PENDING,
        )
        .values(**values)
    )
    if result.rowcount != 1:
        db.refresh(application)
        raise InvalidTransition(f"Application already {application.status.value}")

    db.refresh(application)


"""
지원서 승인

- PENDING → APPROVED 조건부 전이 (이미 처리된 지원서면 InvalidTransition)
- 지원자의 명단(StaffMember) 항목이 없으면 생성
- 지원자 권한이 USER 이면 MODERATOR 로 승격 (SUPPORT/ADMIN 은 유지)
- 관리자 로그 기록

"""

def approve_application(
    db: Session,
    *,
    application_id: int,
    reviewer: User,
    admin_notes: str | None = None,
) -> StaffApplication:
    application = get_application(db, application_id)
    _review(
        db,
        application=application,
        reviewer=reviewer,
        status=ApplicationStatus.APPROVED,
        admin_notes=admin_notes,
    )

    applicant = db.get(User, application.user_id)
    if not applicant:
        raise NotFound("Applicant not found")

    if find_roster_entry(db, applicant.id) is None:
        db.add(
            StaffMember(
                user_id=applicant.id,
                name=applicant.discord_username or applicant.username,
                role=ROSTER_ROLE,
                position=application.position,
                avatar=applicant.avatar,
            )
        )

    if applicant.role == Role.USER:
        applicant.role = Role.MODERATOR

    write_admin_log(
        db,
        actor_id=reviewer.id,
        action=AdminAction.APPROVE_APPLICATION,
        target_type="application",
        target_id=application.id,
        before=ApplicationStatus.PENDING.value,
        after=ApplicationStatus.APPROVED.value,
    )
    db.flush()
    logger.info("Application %s approved by %s", application.id, reviewer.id)
    return application


def reject_application(
    db: Session,
    *,
    application_id: int,
    reviewer: User,
    admin_notes: str | None = None,
) -> StaffApplication:
    application = get_application(db, application_id)
    _review(
        db,
        application=application,
        reviewer=reviewer,
        status=ApplicationStatus.REJECTED,
        admin_notes=admin_notes,
    )
    write_admin_log(
        db,
        actor_id=reviewer.id,
        action=AdminAction.REJECT_APPLICATION,
        target_type="application",
        target_id=application.id,
        before=ApplicationStatus.PENDING.value,
        after=ApplicationStatus.REJECTED.value,
    )
    db.flush()
    logger.info("Application %s rejected by %s", application.id, reviewer.id)
    return application
