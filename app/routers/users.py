"""
users.py

로그인한 사용자 본인의 설정 API.

- GET   /user/settings            : 섹션별 설정 전체 (없는 섹션은 빈 객체)
- PATCH /user/settings/{section}  : 한 섹션 부분 수정 (기존 값에 병합)

섹션: appearance / server / integrations

"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.settings import UserSettingSection, UserSettingUpdate
from app.services.settings import get_user_settings, update_user_section

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/settings")
def read_my_settings(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"settings": get_user_settings(db, user.id)}


@router.patch("/settings/{section}")
def update_my_settings(
    section: UserSettingSection,
    body: UserSettingUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        value = update_user_section(db, user_id=user.id, section=section, value=body.value)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return {"success": True, "section": section, "value": value}
