"""
staff.py

운영진 명단(roster) API.

- 공개: 활성(is_active) 항목만, display_order → name 순
- 관리자: 전체 목록 / 단건 조회 / 생성 / 수정 / 삭제
- user_id 는 사용자당 한 건 (지원서 승인 시 자동 생성되는 항목과 중복 불가)

"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_admin
from app.core.errors import DomainError, ValidationFailed
from app.models.staff import StaffMember
from app.models.user import User
from app.schemas.staff import StaffCreate, StaffResponse, StaffUpdate
from app.services.content import apply_changes, get_or_404

router = APIRouter(prefix="/staff", tags=["staff"])
admin_router = APIRouter(prefix="/admin/staff", tags=["admin-staff"])

_ORDERING = (StaffMember.display_order, StaffMember.name, StaffMember.id)


def _ensure_user(db: Session, user_id: int | None, *, exclude_id: int | None = None) -> None:
    if user_id is None:
        return
    if db.get(User, user_id) is None:
        raise ValidationFailed("User not found")
    stmt = select(StaffMember.id).where(StaffMember.user_id == user_id)
    if exclude_id is not None:
        stmt = stmt.where(StaffMember.id != exclude_id)
    if db.scalar(stmt) is not None:
        raise ValidationFailed("User already has a staff entry")


@router.get("")
def list_staff(db: Session = Depends(get_db)):
    members = db.scalars(select(StaffMember).where(StaffMember.is_active.is_(True)).order_by(*_ORDERING))
    return {"items": [StaffResponse.model_validate(m) for m in members]}


@admin_router.get("")
def admin_list_staff(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    return {"items": [StaffResponse.model_validate(m) for m in db.scalars(select(StaffMember).order_by(*_ORDERING))]}


@admin_router.get("/{member_id}")
def get_staff(
    member_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    member = get_or_404(db, StaffMember, member_id, "Staff member")
    return {"member": StaffResponse.model_validate(member)}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
def create_staff(
    body: StaffCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        _ensure_user(db, body.user_id)
        data = body.model_dump(exclude_none=True)
        member = StaffMember(**data)
        db.add(member)
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("User already has a staff entry")
    db.refresh(member)
    return {"success": True, "member": StaffResponse.model_validate(member)}


@admin_router.put("/{member_id}")
def update_staff(
    member_id: int,
    body: StaffUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        member = get_or_404(db, StaffMember, member_id, "Staff member")
        if "user_id" in body.model_fields_set:
            _ensure_user(db, body.user_id, exclude_id=member.id)
        apply_changes(member, body)
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("User already has a staff entry")
    db.refresh(member)
    return {"success": True, "member": StaffResponse.model_validate(member)}


@admin_router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    member_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    member = get_or_404(db, StaffMember, member_id, "Staff member")
    db.delete(member)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
