"""
admin.py

관리자 전용 API 모음 (사용자 / 권한 / 활동 로그 / 대시보드 / 사이트 설정).

주요 기능:
- 전체 사용자 목록(페이지) / 상세 조회
- 사용자 권한 변경 (자기 자신 변경 금지, 마지막 ADMIN 보호)
- 운영진 활동 로그 조회
- 대시보드: 전체 카운트 / 최근 7일 가입·뉴스 / 최근 7일 서버 접속자 추이
- 사이트 설정 전체 조회 / key 단위 upsert

설계 원칙:
- 모든 엔드포인트는 관리자 권한(get_current_admin)을 요구
- 정책 판단은 service 계층(app.services.admin / settings)에서 수행

"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, aliased

from app.core.deps import get_db, get_current_admin
from app.core.errors import DomainError, NotFound
from app.models.admin_log import AdminActionLog
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.settings import SiteSettingResponse, SiteSettingUpsert
from app.schemas.user import AdminLogResponse, RoleUpdate, UserResponse
from app.services.admin import daily_counts, daily_server_stats, dashboard_stats, set_user_role
from app.services.settings import list_site_settings, upsert_site_setting

router = APIRouter(prefix="/admin", tags=["admin"])


# 전체 회원 목록 조회 엔드포인트(관리자 전용)
@router.get("/users")
def list_users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    total = db.scalar(select(func.count()).select_from(User)) or 0
    users = db.scalars(select(User).order_by(User.id).limit(limit).offset(offset)).all()
    return {
        "items": [UserResponse.model_validate(u) for u in users],
        "meta": {"limit": limit, "offset": offset, "total": total},
    }


# 회원 상세 조회 엔드포인트(관리자 전용)
@router.get("/users/{user_id}")
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return {"user": UserResponse.model_validate(user)}


# 관리자가 회원 권한을 변경하는 엔드포인트
@router.patch("/users/{user_id}/role")
def change_role(
    user_id: int,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        user = set_user_role(db, actor=current_admin, user_id=user_id, role=data.role)
        db.commit()
        db.refresh(user)
    except DomainError:
        db.rollback()
        raise

    return {"success": True, "user": UserResponse.model_validate(user)}


# 관리자 활동 로그 조회 엔드포인트
@router.get("/logs")
def list_admin_logs(
    limit: int = 50,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    limit = max(1, min(limit, 200))

    Actor = aliased(User)

    rows = db.execute(
        select(AdminActionLog, Actor)
        .join(Actor, Actor.id == AdminActionLog.actor_id)
        .order_by(desc(AdminActionLog.created_at), desc(AdminActionLog.id))
        .limit(limit)
    ).all()

    items = []
    for log, actor in rows:
        item = AdminLogResponse.model_validate(log).model_dump(by_alias=True)
        item["actor"] = UserSummary.model_validate(actor)
        items.append(item)

    return {
        "items": items,
        "meta": {
            "limit": limit,
            "count": len(items),
        },
    }


@router.get("/stats")
def stats(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return dashboard_stats(db)


# 최근 7일 일별 가입자 / 뉴스 수
@router.get("/counts")
def counts(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return {"items": daily_counts(db)}


# 최근 7일 일별 게임 서버 접속자 (평균 / 최대)
@router.get("/server-stats")
def server_stats(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return {"items": daily_server_stats(db)}


@router.get("/settings")
def list_settings(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return {"items": [SiteSettingResponse.model_validate(s) for s in list_site_settings(db, include_private=True)]}


@router.put("/settings/{key}")
def put_setting(
    key: str,
    body: SiteSettingUpsert,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    try:
        setting = upsert_site_setting(db, actor=admin, key=key, value=body.value, category=body.category)
        db.commit()
        db.refresh(setting)
    except DomainError:
        db.rollback()
        raise

    return {"success": True, "setting": SiteSettingResponse.model_validate(setting)}
