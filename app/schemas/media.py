from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel

MediaType = Literal["image", "video"]


class MediaCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    url: str = Field(min_length=1, max_length=500)
    thumbnail: str | None = Field(default=None, max_length=500)
    type: MediaType = "image"


class MediaUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    url: str | None = Field(default=None, min_length=1, max_length=500)
    thumbnail: str | None = Field(default=None, max_length=500)
    type: MediaType | None = None
    approved: bool | None = None


class MediaResponse(CamelModel):
    id: int
    user_id: int
    title: str
    description: str | None = None
    url: str
    thumbnail: str | None = None
    type: str
    approved: bool
    created_at: datetime
