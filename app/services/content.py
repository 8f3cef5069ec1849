"""
services/content.py

뉴스 / 가이드라인 / 운영진 명단 / 미디어 / 캐릭터 등
단순 CRUD 리소스가 공통으로 사용하는 헬퍼.

- get_or_404   : id 로 조회, 없으면 NotFound
- apply_changes: PATCH/PUT 요청 중 "실제로 보낸 필드"만 모델에 반영
- create_with_slug / update_with_slug : slug 를 가진 리소스의 생성 / 수정

"""

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.services.slugs import resolve_slug


def get_or_404(db: Session, model, object_id: int, label: str):
    obj = db.get(model, object_id)
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


def apply_changes(obj, body: BaseModel, *, exclude: set[str] | None = None) -> dict:
    changes = body.model_dump(exclude_unset=True, exclude=exclude)
    for field, value in changes.items():
        setattr(obj, field, value)
    return changes


def create_with_slug(db: Session, model, body: BaseModel, *, title_field: str = "title", **extra):
    data = body.model_dump(exclude={"slug"})
    data["slug"] = resolve_slug(db, model, title=data[title_field], slug=body.slug)
    obj = model(**data, **extra)
    db.add(obj)
    db.flush()
    return obj


"""
slug 리소스 수정

- slug 를 명시적으로 보낸 경우에만 slug 변경 (중복이면 400)
- 제목만 바뀌면 기존 slug 유지 (외부 링크가 깨지지 않도록)

"""

def update_with_slug(db: Session, obj, body: BaseModel, *, title_field: str = "title", **extra):
    apply_changes(obj, body, exclude={"slug"})
    if "slug" in body.model_fields_set and body.slug is not None:
        obj.slug = resolve_slug(
            db,
            type(obj),
            title=getattr(obj, title_field),
            slug=body.slug,
            exclude_id=obj.id,
        )
    for field, value in extra.items():
        setattr(obj, field, value)
    db.flush()
    return obj
