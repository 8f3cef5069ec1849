"""
schemas/common.py

모든 요청/응답 스키마가 공유하는 기반 모델.

- API 는 camelCase JSON 을 주고받고, 파이썬 코드는 snake_case 필드를 사용
  (alias_generator=to_camel + populate_by_name=True)
- ORM 객체를 그대로 model_validate 할 수 있도록 from_attributes=True

"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.user import Role


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# 작성자 / 지원자 / 담당자 등 다른 엔티티에 붙여서 보여주는 최소 사용자 정보
class UserSummary(CamelModel):
    id: int
    username: str
    avatar: str | None = None
    role: Role
