from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel, UserSummary


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str | None = Field(default=None, max_length=120)
    color: str | None = Field(default=None, max_length=30)


class CategoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = Field(default=None, max_length=120)
    color: str | None = Field(default=None, max_length=30)


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    color: str | None = None


class NewsCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220)
    excerpt: str | None = Field(default=None, max_length=500)
    content: str = Field(min_length=1)
    cover_image: str | None = Field(default=None, max_length=255)
    category_id: int | None = None
    published: bool = True
    featured: bool = False


class NewsUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220)
    excerpt: str | None = Field(default=None, max_length=500)
    content: str | None = Field(default=None, min_length=1)
    cover_image: str | None = Field(default=None, max_length=255)
    category_id: int | None = None
    published: bool | None = None
    featured: bool | None = None


class NewsResponse(CamelModel):
    id: int
    title: str
    slug: str
    excerpt: str | None = None
    content: str
    cover_image: str | None = None
    category_id: int | None = None
    author_id: int | None = None
    published: bool
    featured: bool
    created_at: datetime
    updated_at: datetime
    category: CategoryResponse | None = None


class NewsDetail(NewsResponse):
    author: UserSummary | None = None
