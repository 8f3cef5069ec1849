from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class GuidelineCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220)
    type: str = Field(default="rules", min_length=1, max_length=50)
    content: str = Field(min_length=1)
    display_order: int = 0
    is_published: bool = False


class GuidelineUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220)
    type: str | None = Field(default=None, min_length=1, max_length=50)
    content: str | None = Field(default=None, min_length=1)
    display_order: int | None = None
    is_published: bool | None = None


class GuidelineResponse(CamelModel):
    id: int
    title: str
    slug: str
    type: str
    content: str
    display_order: int
    is_published: bool
    last_updated_by: int | None = None
    created_at: datetime
    updated_at: datetime
