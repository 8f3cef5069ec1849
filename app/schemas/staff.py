from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class StaffCreate(CamelModel):
    user_id: int | None = None
    name: str = Field(min_length=1, max_length=100)
    role: str = Field(min_length=1, max_length=50)
    position: str = Field(min_length=1, max_length=100)
    avatar: str | None = Field(default=None, max_length=255)
    bio: str | None = None
    joined_at: datetime | None = None
    display_order: int = 999
    is_active: bool = True
    social_links: dict[str, str] | None = None


class StaffUpdate(CamelModel):
    user_id: int | None = None
    name: str | None = Field(default=None, min_length=1, max_length=100)
    role: str | None = Field(default=None, min_length=1, max_length=50)
    position: str | None = Field(default=None, min_length=1, max_length=100)
    avatar: str | None = Field(default=None, max_length=255)
    bio: str | None = None
    joined_at: datetime | None = None
    display_order: int | None = None
    is_active: bool | None = None
    social_links: dict[str, str] | None = None


class StaffResponse(CamelModel):
    id: int
    user_id: int | None = None
    name: str
    role: str
    position: str
    avatar: str | None = None
    bio: str | None = None
    joined_at: datetime
    display_order: int
    is_active: bool
    social_links: dict[str, str] | None = None
