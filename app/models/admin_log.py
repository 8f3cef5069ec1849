"""

admin_log.py

관리자(Admin) / 운영진 행위 기록(Audit Log) 모델 정의 파일.

지원서 승인·거절, 권한 변경, 티켓 배정·종료, 사이트 설정 변경 등
운영진이 수행한 주요 행위를 DB에 영구적으로 기록한다.

설계 원칙:
- 실제 데이터 변경과 같은 트랜잭션에서 기록 (둘 다 커밋되거나 둘 다 롤백)
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- 대상(target)은 type + id 로 느슨하게 참조 (users 외 테이블도 대상이 되므로)

"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class AdminAction(str, enum.Enum):
    SET_ROLE = "SET_ROLE"
    APPROVE_APPLICATION = "APPROVE_APPLICATION"
    REJECT_APPLICATION = "REJECT_APPLICATION"
    ASSIGN_TICKET = "ASSIGN_TICKET"
    CLOSE_TICKET = "CLOSE_TICKET"
    UPDATE_SETTING = "UPDATE_SETTING"


class AdminActionLog(Base):
    __tablename__ = "admin_action_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    actor_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    action: Mapped[AdminAction] = mapped_column(SAEnum(AdminAction, name="admin_action"), nullable=False)

    target_type: Mapped[str] = mapped_column(String(30), nullable=False)
    target_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    before: Mapped[str | None] = mapped_column(String(100), nullable=True)
    after: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
