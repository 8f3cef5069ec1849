"""
services/settings.py

사이트 설정(site_settings) / 사용자 설정(user_settings) 서비스.

- 'private' 카테고리 설정은 공개 API 에서 제외
- 사용자 설정은 섹션(appearance / server / integrations) 단위 JSON,
  PATCH 시 기존 값에 얕게 병합(shallow merge)

"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.admin_log import AdminAction
from app.models.settings import SiteSetting, UserSetting
from app.models.user import User
from app.services.admin_log import write_admin_log

PRIVATE_CATEGORY = "private"
USER_SETTING_SECTIONS = ("appearance", "server", "integrations")


def get_site_value(db: Session, key: str, default: str | None = None) -> str | None:
    value = db.scalar(select(SiteSetting.value).where(SiteSetting.key == key))
    return value if value is not None else default


def list_site_settings(db: Session, *, include_private: bool = False) -> list[SiteSetting]:
    stmt = select(SiteSetting).order_by(SiteSetting.category, SiteSetting.key)
    if not include_private:
        stmt = stmt.where(SiteSetting.category != PRIVATE_CATEGORY)
    return list(db.scalars(stmt))


def upsert_site_setting(db: Session, *, actor: User, key: str, value: str, category: str) -> SiteSetting:
    setting = db.scalar(select(SiteSetting).where(SiteSetting.key == key))
    before = None
    if setting:
        before = setting.value
        setting.value = value
        setting.category = category
    else:
        setting = SiteSetting(key=key, value=value, category=category)
        db.add(setting)

    write_admin_log(
        db,
        actor_id=actor.id,
        action=AdminAction.UPDATE_SETTING,
        target_type="setting",
        # before/after 컬럼은 100자 제한
        before=f"{key}={before}"[:100] if before is not None else None,
        after=f"{key}={value}"[:100],
    )
    db.flush()
    return setting


def get_user_settings(db: Session, user_id: int) -> dict[str, dict]:
    rows = db.scalars(select(UserSetting).where(UserSetting.user_id == user_id))
    result: dict[str, dict] = {section: {} for section in USER_SETTING_SECTIONS}
    for row in rows:
        result[row.section] = row.value or {}
    return result


def update_user_section(db: Session, *, user_id: int, section: str, value: dict) -> dict:
    row = db.scalar(
        select(UserSetting).where(UserSetting.user_id == user_id, UserSetting.section == section)
    )
    if row:
        # JSON 컬럼은 변경 감지를 위해 새 dict 로 교체
        row.value = {**(row.value or {}), **value}
    else:
        row = UserSetting(user_id=user_id, section=section, value=dict(value))
        db.add(row)
    db.flush()
    return row.value
