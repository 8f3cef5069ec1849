from datetime import datetime

from app.models.admin_log import AdminAction
from app.models.user import Role
from app.schemas.common import CamelModel


# 관리자 role 변경 요청용
class RoleUpdate(CamelModel):
    role: Role


# 관리자 화면용 사용자 응답 (비밀번호 해시 등 민감 정보 제외)
class UserResponse(CamelModel):
    id: int
    username: str
    role: Role
    discord_id: str | None = None
    discord_username: str | None = None
    avatar: str | None = None
    last_login: datetime | None = None
    created_at: datetime


class AdminLogResponse(CamelModel):
    id: int
    action: AdminAction
    target_type: str
    target_id: int | None = None
    before: str | None = None
    after: str | None = None
    created_at: datetime
