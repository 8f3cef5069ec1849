"""
services/admin.py

관리자 대시보드 / 사용자 관리 관련 비즈니스 로직 모음.

주요 기능:
- 현재 ADMIN 계정 수 계산 (마지막 관리자 보호)
- 권한 변경 정책 검증 및 적용
- 대시보드 집계 (전체 카운트 / 최근 7일 일별 가입·뉴스 / 서버 인원 추이)

설계 원칙:
- HTTP / FastAPI 의존성 없음 (도메인 예외만 발생)
- 트랜잭션 제어(commit/rollback)는 라우터에서 수행
- 일별 집계는 DB 방언별 날짜 함수 차이를 피하기 위해 파이썬에서 버킷팅

관련 파일:
- app.models.user        : User / Role 모델
- app.routers.admin      : 관리자 API

"""

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationFailed
from app.db.base import utcnow
from app.models.admin_log import AdminAction
from app.models.application import ApplicationStatus, StaffApplication
from app.models.news import NewsArticle
from app.models.settings import ServerStatSample
from app.models.staff import StaffMember
from app.models.ticket import Ticket, TicketStatus
from app.models.user import Role, User
from app.services.admin_log import write_admin_log

HISTORY_DAYS = 7


"""
현재 ADMIN 계정 수를 반환

- Role.ADMIN 인 사용자만 집계
- 마지막 ADMIN 보호 로직에서 사용

"""

def count_admins(db: Session) -> int:
    return db.scalar(
        select(func.count()).select_from(User).where(User.role == Role.ADMIN)
    ) or 0


"""
사용자 권한 변경

- 자기 자신의 권한은 변경 불가
- 이미 같은 권한이면 거부
- 마지막 ADMIN 강등 금지
- 변경 내역은 같은 트랜잭션에 AdminActionLog 로 기록

"""

def set_user_role(db: Session, *, actor: User, user_id: int, role: Role) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    if user.id == actor.id:
        raise ValidationFailed("Cannot change your own role")

    if user.role == role:
        raise ValidationFailed(f"User already {user.role.value}")

    if user.role == Role.ADMIN and role != Role.ADMIN and count_admins(db) <= 1:
        raise ValidationFailed("Cannot demote the last admin")

    before = user.role
    user.role = role
    write_admin_log(
        db,
        actor_id=actor.id,
        action=AdminAction.SET_ROLE,
        target_type="user",
        target_id=user.id,
        before=before.value,
        after=role.value,
    )
    db.flush()
    return user


def _count(db: Session, model, *criteria) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return db.scalar(stmt) or 0


def dashboard_stats(db: Session) -> dict:
    return {
        "users": _count(db, User),
        "staff": _count(db, StaffMember, StaffMember.is_active.is_(True)),
        "news": _count(db, NewsArticle),
        "pendingApplications": _count(
            db, StaffApplication, StaffApplication.status == ApplicationStatus.PENDING
        ),
        "openTickets": _count(db, Ticket, Ticket.status != TicketStatus.CLOSED),
        "totalTickets": _count(db, Ticket),
    }


def _as_utc(value: datetime) -> datetime:
    # SQLite 는 tz 정보를 저장하지 않으므로 naive 값은 UTC 로 간주
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _history_days(now: datetime) -> list[date]:
    today = now.date()
    return [today - timedelta(days=offset) for offset in range(HISTORY_DAYS - 1, -1, -1)]


"""
최근 7일 일별 가입자 수 / 뉴스 작성 수

- 데이터가 없는 날도 0 으로 채워서 항상 7개 항목 반환
- 반환: [{"date": "2026-01-01", "users": 3, "news": 1}, ...]

"""

def daily_counts(db: Session, *, now: datetime | None = None) -> list[dict]:
    now = now or utcnow()
    days = _history_days(now)
    since = datetime.combine(days[0], datetime.min.time(), tzinfo=timezone.utc)

    buckets: dict[date, dict[str, int]] = defaultdict(lambda: {"users": 0, "news": 0})

    for created in db.scalars(select(User.created_at).where(User.created_at >= since)):
        buckets[_as_utc(created).date()]["users"] += 1
    for created in db.scalars(select(NewsArticle.created_at).where(NewsArticle.created_at >= since)):
        buckets[_as_utc(created).date()]["news"] += 1

    return [{"date": d.isoformat(), **buckets[d]} for d in days]


"""
최근 7일 일별 게임 서버 접속자 추이

- 폴링 표본(server_stat_samples) 기준
- players: 그날 표본 평균 (반올림), peak: 그날 최대값

"""

def daily_server_stats(db: Session, *, now: datetime | None = None) -> list[dict]:
    now = now or utcnow()
    days = _history_days(now)
    since = datetime.combine(days[0], datetime.min.time(), tzinfo=timezone.utc)

    samples: dict[date, list[int]] = defaultdict(list)
    rows = db.execute(
        select(ServerStatSample.created_at, ServerStatSample.players)
        .where(ServerStatSample.created_at >= since)
    ).all()
    for created, players in rows:
        samples[_as_utc(created).date()].append(players)

    result = []
    for d in days:
        values = samples.get(d, [])
        result.append(
            {
                "date": d.isoformat(),
                "players": round(sum(values) / len(values)) if values else 0,
                "peak": max(values) if values else 0,
            }
        )
    return result
