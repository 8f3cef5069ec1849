"""
guidelines.py

서버 규칙 / 가이드 문서 API.

- 공개: 게시된 문서만 (type 필터), id 또는 slug 로 상세
- 관리자: 전체 목록 / 생성 / 수정 / 삭제, 수정자(last_updated_by) 기록

"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_admin
from app.core.errors import DomainError, NotFound, ValidationFailed
from app.models.guideline import Guideline
from app.models.user import User
from app.schemas.guideline import GuidelineCreate, GuidelineResponse, GuidelineUpdate
from app.services.content import create_with_slug, get_or_404, update_with_slug

router = APIRouter(prefix="/guidelines", tags=["guidelines"])
admin_router = APIRouter(prefix="/admin/guidelines", tags=["admin-guidelines"])

_ORDERING = (Guideline.type, Guideline.display_order, Guideline.id)


@router.get("")
def list_guidelines(type: str | None = None, db: Session = Depends(get_db)):
    stmt = select(Guideline).where(Guideline.is_published.is_(True))
    if type:
        stmt = stmt.where(Guideline.type == type)
    return {"items": [GuidelineResponse.model_validate(g) for g in db.scalars(stmt.order_by(*_ORDERING))]}


@router.get("/slug/{slug}")
def get_guideline_by_slug(slug: str, db: Session = Depends(get_db)):
    guideline = db.scalar(
        select(Guideline).where(Guideline.slug == slug, Guideline.is_published.is_(True))
    )
    if not guideline:
        raise NotFound("Guideline not found")
    return {"guideline": GuidelineResponse.model_validate(guideline)}


@router.get("/{guideline_id}")
def get_guideline(guideline_id: int, db: Session = Depends(get_db)):
    guideline = db.get(Guideline, guideline_id)
    if not guideline or not guideline.is_published:
        raise NotFound("Guideline not found")
    return {"guideline": GuidelineResponse.model_validate(guideline)}


@admin_router.get("")
def admin_list_guidelines(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return {"items": [GuidelineResponse.model_validate(g) for g in db.scalars(select(Guideline).order_by(*_ORDERING))]}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
def create_guideline(
    body: GuidelineCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    try:
        guideline = create_with_slug(db, Guideline, body, last_updated_by=admin.id)
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("Slug already in use")
    db.refresh(guideline)
    return {"success": True, "guideline": GuidelineResponse.model_validate(guideline)}


@admin_router.put("/{guideline_id}")
def update_guideline(
    guideline_id: int,
    body: GuidelineUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    try:
        guideline = get_or_404(db, Guideline, guideline_id, "Guideline")
        update_with_slug(db, guideline, body, last_updated_by=admin.id)
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("Slug already in use")
    db.refresh(guideline)
    return {"success": True, "guideline": GuidelineResponse.model_validate(guideline)}


@admin_router.delete("/{guideline_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guideline(
    guideline_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    guideline = get_or_404(db, Guideline, guideline_id, "Guideline")
    db.delete(guideline)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
