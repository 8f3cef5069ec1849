"""
services/slugs.py

제목 → URL slug 변환 및 중복 처리.

규칙:
- 유니코드 정규화(NFKD) 후 결합 문자(악센트) 제거, 소문자화
- [a-z0-9] 이외 문자의 연속은 하이픈 하나로 치환, 양끝 하이픈 제거
- 자동 생성 slug 가 이미 쓰이고 있으면 -2, -3 ... 을 붙여 결정적으로 구분
- 사용자가 직접 지정한 slug 가 이미 쓰이고 있으면 거부 (ValidationFailed)

"""

import re
import unicodedata

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import ValidationFailed

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    return _NON_SLUG_RE.sub("-", stripped.lower()).strip("-")


def slug_taken(db: Session, model, slug: str, *, exclude_id: int | None = None) -> bool:
    stmt = select(model.id).where(model.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


"""
저장할 slug 결정

- slug 를 명시하면 정규화 후 그대로 사용 (중복이면 400)
- 생략하면 title 에서 생성하고 중복 시 접미사로 구분
- exclude_id: 수정 시 자기 자신은 중복 검사에서 제외

"""

def resolve_slug(
    db: Session,
    model,
    *,
    title: str,
    slug: str | None = None,
    exclude_id: int | None = None,
) -> str:
    if slug is not None:
        candidate = slugify(slug)
        if not candidate:
            raise ValidationFailed("Slug must contain at least one letter or digit")
        if slug_taken(db, model, candidate, exclude_id=exclude_id):
            raise ValidationFailed("Slug already in use")
        return candidate

    base = slugify(title)
    if not base:
        raise ValidationFailed("Cannot derive a slug from the title; provide one explicitly")

    candidate = base
    suffix = 2
    while slug_taken(db, model, candidate, exclude_id=exclude_id):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate
