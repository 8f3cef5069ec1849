"""
사이트 설정 / 사용자 설정 API 테스트.
"""

from sqlalchemy import select

from app.models.admin_log import AdminAction, AdminActionLog
from app.models.user import Role
from tests.helpers import user_with_token


def test_site_settings_upsert_and_public_view(client, db):
    admin_user, admin = user_with_token(db, role=Role.ADMIN)

    r = client.put("/api/admin/settings/server_name", headers=admin, json={"value": "My RP", "category": "server"})
    assert r.status_code == 200, r.text
    assert r.json()["setting"]["value"] == "My RP"

    client.put("/api/admin/settings/server_name", headers=admin, json={"value": "My RP 2", "category": "server"})
    client.put("/api/admin/settings/webhook_secret", headers=admin, json={"value": "s3cr3t", "category": "private"})

    public = client.get("/api/settings/public")
    assert public.status_code == 200
    assert public.json()["settings"] == {"server_name": "My RP 2"}

    everything = client.get("/api/admin/settings", headers=admin).json()["items"]
    assert {s["key"] for s in everything} == {"server_name", "webhook_secret"}

    logs = db.scalars(
        select(AdminActionLog).where(AdminActionLog.action == AdminAction.UPDATE_SETTING)
    ).all()
    assert len(logs) == 3
    assert all(log.actor_id == admin_user.id for log in logs)
    assert {log.before for log in logs} == {None, "server_name=My RP"}


def test_site_settings_admin_only(client, db):
    _, user = user_with_token(db)
    r = client.put("/api/admin/settings/server_name", headers=user, json={"value": "x", "category": "server"})
    assert r.status_code == 403


def test_user_settings_sections_merge(client, db):
    _, headers = user_with_token(db)
    _, other = user_with_token(db)

    initial = client.get("/api/user/settings", headers=headers)
    assert initial.status_code == 200
    assert initial.json()["settings"] == {"appearance": {}, "server": {}, "integrations": {}}

    first = client.patch("/api/user/settings/appearance", headers=headers, json={"value": {"theme": "dark"}})
    assert first.status_code == 200, first.text
    assert first.json()["value"] == {"theme": "dark"}

    merged = client.patch("/api/user/settings/appearance", headers=headers, json={"value": {"compact": True}})
    assert merged.json()["value"] == {"theme": "dark", "compact": True}

    settings = client.get("/api/user/settings", headers=headers).json()["settings"]
    assert settings["appearance"] == {"theme": "dark", "compact": True}
    assert settings["server"] == {}

    # 다른 사용자의 설정과 섞이지 않음
    assert client.get("/api/user/settings", headers=other).json()["settings"]["appearance"] == {}

    unknown = client.patch("/api/user/settings/billing", headers=headers, json={"value": {}})
    assert unknown.status_code == 400
