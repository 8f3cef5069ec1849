"""
applications.py

사용자용 운영진 지원서 API.

- POST /applications        : 지원서 제출 (PENDING 지원서가 이미 있으면 400)
- GET  /applications        : 내 지원서 목록 (최신순)
- GET  /user/applications   : 위와 동일 (프로필 화면용 별칭)

"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user
from app.core.errors import DomainError
from app.models.user import User
from app.schemas.application import ApplicationCreate, ApplicationResponse
from app.services.applications import (
    PENDING_EXISTS_MESSAGE,
    list_user_applications,
    submit_application,
)

router = APIRouter(tags=["applications"])


@router.post("/applications", status_code=status.HTTP_201_CREATED)
def create_application(
    body: ApplicationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        application = submit_application(db, user=user, data=body)
        db.commit()
        db.refresh(application)
    except DomainError:
        db.rollback()
        raise
    except IntegrityError:
        # 동시 제출로 partial unique index 에 걸린 경우
        db.rollback()
        raise HTTPException(status_code=400, detail=PENDING_EXISTS_MESSAGE)

    return {"success": True, "application": ApplicationResponse.model_validate(application)}


def _my_applications(db: Session, user: User) -> dict:
    return {
        "items": [ApplicationResponse.model_validate(a) for a in list_user_applications(db, user.id)]
    }


@router.get("/applications")
def my_applications(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _my_applications(db, user)


@router.get("/user/applications")
def my_applications_alias(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _my_applications(db, user)
