from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.services.settings import list_site_settings

router = APIRouter(prefix="/settings", tags=["settings"])


# 공개 사이트 설정 (private 카테고리 제외) → {key: value}
@router.get("/public")
def public_settings(db: Session = Depends(get_db)):
    return {"settings": {s.key: s.value for s in list_site_settings(db)}}
