"""
media.py

미디어 갤러리 API.

- 로그인 사용자: 스크린샷 / 영상 링크 제출 (승인 대기)
- 공개: 승인된 항목만 (type 필터, 단건 조회 포함)
- 관리자: 전체 목록(승인 여부 필터) / 단건 조회 / 승인 / 수정 / 삭제

"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_admin, get_current_user
from app.core.errors import NotFound
from app.models.media import MediaItem
from app.models.user import User
from app.schemas.media import MediaCreate, MediaResponse, MediaType, MediaUpdate
from app.services.content import apply_changes, get_or_404

router = APIRouter(prefix="/media", tags=["media"])
admin_router = APIRouter(prefix="/admin/media", tags=["admin-media"])

_ORDERING = (desc(MediaItem.created_at), desc(MediaItem.id))


@router.get("")
def list_media(
    type: MediaType | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    stmt = select(MediaItem).where(MediaItem.approved.is_(True))
    if type:
        stmt = stmt.where(MediaItem.type == type)
    items = db.scalars(stmt.order_by(*_ORDERING).limit(limit).offset(offset))
    return {"items": [MediaResponse.model_validate(m) for m in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_media(
    body: MediaCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    item = MediaItem(user_id=user.id, approved=False, **body.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)
    return {"success": True, "media": MediaResponse.model_validate(item)}


@router.get("/{media_id}")
def get_media(media_id: int, db: Session = Depends(get_db)):
    item = db.get(MediaItem, media_id)
    if not item or not item.approved:
        raise NotFound("Media item not found")
    return {"media": MediaResponse.model_validate(item)}


@admin_router.get("")
def admin_list_media(
    approved: bool | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    stmt = select(MediaItem)
    if approved is not None:
        stmt = stmt.where(MediaItem.approved.is_(approved))
    return {"items": [MediaResponse.model_validate(m) for m in db.scalars(stmt.order_by(*_ORDERING))]}


@admin_router.get("/{media_id}")
def admin_get_media(
    media_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    item = get_or_404(db, MediaItem, media_id, "Media item")
    return {"media": MediaResponse.model_validate(item)}


@admin_router.patch("/{media_id}/approve")
def approve_media(
    media_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    item = get_or_404(db, MediaItem, media_id, "Media item")
    item.approved = True
    db.commit()
    db.refresh(item)
    return {"success": True, "media": MediaResponse.model_validate(item)}


@admin_router.put("/{media_id}")
def update_media(
    media_id: int,
    body: MediaUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    item = get_or_404(db, MediaItem, media_id, "Media item")
    apply_changes(item, body)
    db.commit()
    db.refresh(item)
    return {"success": True, "media": MediaResponse.model_validate(item)}


@admin_router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_media(
    media_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    item = get_or_404(db, MediaItem, media_id, "Media item")
    db.delete(item)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
