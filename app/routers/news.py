"""
news.py

뉴스 / 뉴스 카테고리 API.

공개 API (/news):
- GET /news                : 게시된 기사 목록 (category slug 필터, 페이지, 카테고리 포함)
- GET /news/featured       : 게시 + featured 기사
- GET /news/categories     : 카테고리 목록
- GET /news/{slug}         : 게시된 기사 상세 (작성자 요약 포함)

관리자 API (/admin/news):
- 전체 기사 목록(미게시 포함) / 생성 / 수정 / 삭제
- 카테고리 생성 / 수정 / 삭제

slug 는 생략 시 제목에서 생성 (중복이면 -2, -3 ...), 명시했는데 중복이면 400.

"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_admin
from app.core.errors import DomainError, NotFound, ValidationFailed
from app.models.news import NewsArticle, NewsCategory
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.news import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    NewsCreate,
    NewsDetail,
    NewsResponse,
    NewsUpdate,
)
from app.services.content import create_with_slug, get_or_404, update_with_slug

router = APIRouter(prefix="/news", tags=["news"])
admin_router = APIRouter(prefix="/admin/news", tags=["admin-news"])


def _with_category(db: Session, articles: list[NewsArticle]) -> list[NewsResponse]:
    category_ids = {a.category_id for a in articles if a.category_id is not None}
    categories = {}
    if category_ids:
        categories = {
            c.id: CategoryResponse.model_validate(c)
            for c in db.scalars(select(NewsCategory).where(NewsCategory.id.in_(category_ids)))
        }
    result = []
    for article in articles:
        item = NewsResponse.model_validate(article)
        item.category = categories.get(article.category_id)
        result.append(item)
    return result


def _ensure_category(db: Session, category_id: int | None) -> None:
    if category_id is not None and db.get(NewsCategory, category_id) is None:
        raise ValidationFailed("Category not found")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("Slug already in use")


# ---- 공개 API ----

@router.get("")
def list_news(
    category: str | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    stmt = select(NewsArticle).where(NewsArticle.published.is_(True))
    if category:
        stmt = stmt.join(NewsCategory, NewsCategory.id == NewsArticle.category_id).where(
            NewsCategory.slug == category
        )
    stmt = stmt.order_by(desc(NewsArticle.created_at), desc(NewsArticle.id)).limit(limit).offset(offset)
    return {"items": _with_category(db, list(db.scalars(stmt)))}


@router.get("/featured")
def featured_news(
    limit: int = Query(3, ge=1, le=20),
    db: Session = Depends(get_db),
):
    articles = db.scalars(
        select(NewsArticle)
        .where(NewsArticle.published.is_(True), NewsArticle.featured.is_(True))
        .order_by(desc(NewsArticle.created_at), desc(NewsArticle.id))
        .limit(limit)
    ).all()
    return {"items": _with_category(db, list(articles))}


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    categories = db.scalars(select(NewsCategory).order_by(NewsCategory.name)).all()
    return {"items": [CategoryResponse.model_validate(c) for c in categories]}


@router.get("/{slug}")
def get_news(slug: str, db: Session = Depends(get_db)):
    article = db.scalar(
        select(NewsArticle).where(NewsArticle.slug == slug, NewsArticle.published.is_(True))
    )
    if not article:
        raise NotFound("Article not found")

    detail = NewsDetail.model_validate(article)
    detail.category = _with_category(db, [article])[0].category
    author = db.get(User, article.author_id) if article.author_id else None
    detail.author = UserSummary.model_validate(author) if author else None
    return {"article": detail}


# ---- 관리자 API ----

@admin_router.get("")
def admin_list_news(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    articles = db.scalars(
        select(NewsArticle)
        .order_by(desc(NewsArticle.created_at), desc(NewsArticle.id))
        .limit(limit)
        .offset(offset)
    ).all()
    return {"items": _with_category(db, list(articles))}


@admin_router.post("", status_code=status.HTTP_201_CREATED)
def create_news(
    body: NewsCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    try:
        _ensure_category(db, body.category_id)
        article = create_with_slug(db, NewsArticle, body, author_id=admin.id)
        _commit(db)
    except DomainError:
        db.rollback()
        raise
    db.refresh(article)
    return {"success": True, "article": _with_category(db, [article])[0]}


@admin_router.put("/{article_id}")
def update_news(
    article_id: int,
    body: NewsUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        article = get_or_404(db, NewsArticle, article_id, "Article")
        if "category_id" in body.model_fields_set:
            _ensure_category(db, body.category_id)
        update_with_slug(db, article, body)
        _commit(db)
    except DomainError:
        db.rollback()
        raise
    db.refresh(article)
    return {"success": True, "article": _with_category(db, [article])[0]}


@admin_router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_news(
    article_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    article = get_or_404(db, NewsArticle, article_id, "Article")
    db.delete(article)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@admin_router.post("/categories", status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        category = create_with_slug(db, NewsCategory, body, title_field="name")
        _commit(db)
    except DomainError:
        db.rollback()
        raise
    db.refresh(category)
    return {"success": True, "category": CategoryResponse.model_validate(category)}


@admin_router.put("/categories/{category_id}")
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        category = get_or_404(db, NewsCategory, category_id, "Category")
        update_with_slug(db, category, body, title_field="name")
        _commit(db)
    except DomainError:
        db.rollback()
        raise
    db.refresh(category)
    return {"success": True, "category": CategoryResponse.model_validate(category)}


# 카테고리 삭제 시 기사들의 category_id 는 NULL 로 (FK ondelete=SET NULL, SQLite 대비 직접 처리)
@admin_router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    category = get_or_404(db, NewsCategory, category_id, "Category")
    for article in db.scalars(select(NewsArticle).where(NewsArticle.category_id == category.id)):
        article.category_id = None
    db.delete(category)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
