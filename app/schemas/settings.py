from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from app.schemas.common import CamelModel

UserSettingSection = Literal["appearance", "server", "integrations"]


class SiteSettingUpsert(CamelModel):
    value: str
    category: str = Field(min_length=1, max_length=50)


class SiteSettingResponse(CamelModel):
    key: str
    value: str
    category: str
    updated_at: datetime


class UserSettingUpdate(CamelModel):
    value: dict[str, Any]
