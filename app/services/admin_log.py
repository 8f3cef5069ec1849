"""
services/admin_log.py

운영진 행위 로그 기록 서비스.

이 파일은 관리자/운영진이 수행한 주요 행위를
AdminActionLog 테이블에 기록하는 역할을 담당한다.

서비스 계층(지원서 승인, 티켓 배정 등)이나 라우터에서 호출되며,
로그 row 는 실제 데이터 변경과 같은 트랜잭션에 추가된다.

설계 원칙:
- 로그 기록 자체는 flush/commit 하지 않음 (호출 측 트랜잭션에 포함)
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계

"""

from sqlalchemy.orm import Session
from app.models.admin_log import AdminActionLog, AdminAction


"""
운영진 행위 로그 기록 함수

- actor_id    : 행위를 수행한 운영진 ID
- action      : 수행된 행위 유형
- target_type : 대상 종류 ('user', 'application', 'ticket', 'setting')
- target_id   : 대상 ID (선택)
- before      : 변경 전 값 (선택, 예: 'user' / 'pending')
- after       : 변경 후 값 (선택)

NOTE:
- db.commit()은 호출 측(라우터)에서 수행

"""
def write_admin_log(
    db: Session,
    *,
    actor_id: int,
    action: AdminAction,
    target_type: str,
    target_id: int | None = None,
    before: str | None = None,
    after: str | None = None,
) -> AdminActionLog:
    log = AdminActionLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        before=before,
        after=after,
    )
    db.add(log)
    return log
