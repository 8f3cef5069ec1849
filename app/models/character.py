from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class Character(Base):
    """롤플레이 캐릭터 카드.

    stats     : {"strength": 12, "dexterity": 14, ...}
    skills    : [{"name": "...", "level": 40}, ...]
    equipment : [{"name": "...", "description": "..."}, ...]
    relations : [{"name": "...", "relation": "..."}, ...]
    """

    __tablename__ = "characters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str | None] = mapped_column(String(150), nullable=True)
    character_class: Mapped[str] = mapped_column("class", String(50), nullable=False)
    race: Mapped[str] = mapped_column(String(50), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    alignment: Mapped[str | None] = mapped_column(String(50), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    origin: Mapped[str | None] = mapped_column(String(150), nullable=True)
    background: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    stats: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    skills: Mapped[list | None] = mapped_column(JSON, nullable=True)
    equipment: Mapped[list | None] = mapped_column(JSON, nullable=True)
    relations: Mapped[list | None] = mapped_column(JSON, nullable=True)

    current_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_level_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
