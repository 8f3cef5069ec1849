from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.common import CamelModel


class CharacterCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    title: str | None = Field(default=None, max_length=150)
    character_class: str = Field(min_length=1, max_length=50, alias="class")
    race: str = Field(min_length=1, max_length=50)
    level: int = Field(default=1, ge=1)
    alignment: str | None = Field(default=None, max_length=50)
    age: int | None = Field(default=None, ge=0)
    origin: str | None = Field(default=None, max_length=150)
    background: str | None = None
    image_url: str | None = Field(default=None, max_length=500)
    stats: dict[str, int] | None = None
    skills: list[dict[str, Any]] | None = None
    equipment: list[dict[str, Any]] | None = None
    relations: list[dict[str, Any]] | None = None
    current_xp: int = Field(default=0, ge=0)
    next_level_xp: int = Field(default=100, ge=1)
    is_published: bool = True


class CharacterUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    title: str | None = Field(default=None, max_length=150)
    character_class: str | None = Field(default=None, min_length=1, max_length=50, alias="class")
    race: str | None = Field(default=None, min_length=1, max_length=50)
    level: int | None = Field(default=None, ge=1)
    alignment: str | None = Field(default=None, max_length=50)
    age: int | None = Field(default=None, ge=0)
    origin: str | None = Field(default=None, max_length=150)
    background: str | None = None
    image_url: str | None = Field(default=None, max_length=500)
    stats: dict[str, int] | None = None
    skills: list[dict[str, Any]] | None = None
    equipment: list[dict[str, Any]] | None = None
    relations: list[dict[str, Any]] | None = None
    current_xp: int | None = Field(default=None, ge=0)
    next_level_xp: int | None = Field(default=None, ge=1)
    is_published: bool | None = None


class CharacterResponse(CamelModel):
    id: int
    name: str
    title: str | None = None
    character_class: str = Field(alias="class")
    race: str
    level: int
    alignment: str | None = None
    age: int | None = None
    origin: str | None = None
    background: str | None = None
    image_url: str | None = None
    stats: dict[str, int] | None = None
    skills: list[dict[str, Any]] | None = None
    equipment: list[dict[str, Any]] | None = None
    relations: list[dict[str, Any]] | None = None
    current_xp: int
    next_level_xp: int
    is_published: bool
    created_at: datetime
    updated_at: datetime
