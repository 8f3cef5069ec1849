"""
운영진 지원서 통합 테스트.
- 제출 → PENDING 중복 제출 거부 → 승인(명단 생성 + 권한 승격 + 로그) → 재승인 거부
- 거절 후 재지원 가능, 관리자 메모, 권한 검사, CSV / XLSX 내보내기
"""

import io

from openpyxl import load_workbook
from sqlalchemy import select

from app.models.admin_log import AdminAction, AdminActionLog
from app.models.application import ApplicationStatus, StaffApplication
from app.models.staff import StaffMember
from app.models.user import Role, User
from app.services import applications as application_service
from tests.helpers import user_with_token

APPLICATION = {
    "position": "Game Moderator",
    "experience": "Two years moderating a roleplay server",
    "reason": "I want to help the community",
    "age": 24,
    "timezone": "Europe/Paris",
    "languages": "French, English",
    "availabilityHours": 15,
}


def _submit(client, headers, **overrides) -> int:
    r = client.post("/api/applications", headers=headers, json={**APPLICATION, **overrides})
    assert r.status_code == 201, r.text
    return r.json()["application"]["id"]


def test_submit_and_list_own_applications(client, db):
    _, headers = user_with_token(db)

    r = client.post("/api/applications", headers=headers, json=APPLICATION)
    assert r.status_code == 201, r.text
    application = r.json()["application"]
    assert application["status"] == "pending"
    assert application["availabilityHours"] == 15

    mine = client.get("/api/applications", headers=headers)
    assert mine.status_code == 200
    assert [a["id"] for a in mine.json()["items"]] == [application["id"]]

    alias = client.get("/api/user/applications", headers=headers)
    assert alias.json() == mine.json()


def test_second_pending_application_rejected(client, db):
    _, headers = user_with_token(db)
    _submit(client, headers)

    r = client.post("/api/applications", headers=headers, json=APPLICATION)
    assert r.status_code == 400
    assert r.json()["message"] == "A pending application exists for this user"


def test_submit_requires_login_and_fields(client, db):
    assert client.post("/api/applications", json=APPLICATION).status_code == 401

    _, headers = user_with_token(db)
    r = client.post("/api/applications", headers=headers, json={"position": "Moderator"})
    assert r.status_code == 400
    fields = {e["field"] for e in r.json()["errors"]}
    assert {"experience", "reason"} <= fields


def test_approve_creates_roster_entry_and_promotes(client, db):
    applicant, user_headers = user_with_token(db)
    admin, admin_headers = user_with_token(db, role=Role.ADMIN)
    application_id = _submit(client, user_headers)

    r = client.patch(
        f"/api/admin/applications/{application_id}/approve",
        headers=admin_headers,
        json={"adminNotes": "Welcome aboard"},
    )
    assert r.status_code == 200, r.text
    body = r.json()["application"]
    assert body["status"] == "approved"
    assert body["reviewedBy"] == admin.id
    assert body["reviewedAt"] is not None
    assert body["adminNotes"] == "Welcome aboard"

    db.expire_all()
    assert db.get(User, applicant.id).role == Role.MODERATOR

    roster = db.scalars(select(StaffMember).where(StaffMember.user_id == applicant.id)).all()
    assert len(roster) == 1
    assert roster[0].role == "moderator"
    assert roster[0].position == "Game Moderator"
    assert roster[0].name == applicant.username

    log = db.scalar(select(AdminActionLog).where(AdminActionLog.action == AdminAction.APPROVE_APPLICATION))
    assert log is not None
    assert log.actor_id == admin.id
    assert log.target_id == application_id

    # 승인된 사용자는 공개 명단에도 노출
    public = client.get("/api/staff").json()["items"]
    assert [m["userId"] for m in public] == [applicant.id]


def test_double_approve_is_rejected_without_side_effects(client, db):
    applicant, user_headers = user_with_token(db)
    _, admin_headers = user_with_token(db, role=Role.ADMIN)
    application_id = _submit(client, user_headers)

    first = client.patch(f"/api/admin/applications/{application_id}/approve", headers=admin_headers)
    assert first.status_code == 200, first.text

    second = client.patch(f"/api/admin/applications/{application_id}/approve", headers=admin_headers)
    assert second.status_code == 400
    assert second.json()["message"] == "Application already approved"

    reject = client.patch(f"/api/admin/applications/{application_id}/reject", headers=admin_headers)
    assert reject.status_code == 400
    assert reject.json()["message"] == "Application already approved"

    roster_count = len(db.scalars(select(StaffMember).where(StaffMember.user_id == applicant.id)).all())
    assert roster_count == 1


def test_approve_keeps_existing_roster_entry_and_higher_role(client, db):
    applicant, user_headers = user_with_token(db, role=Role.SUPPORT)
    _, admin_headers = user_with_token(db, role=Role.ADMIN)
    db.add(StaffMember(user_id=applicant.id, name="Existing", role="support", position="Helper"))
    db.commit()
    application_id = _submit(client, user_headers)

    r = client.patch(f"/api/admin/applications/{application_id}/approve", headers=admin_headers)
    assert r.status_code == 200, r.text

    db.expire_all()
    assert db.get(User, applicant.id).role == Role.SUPPORT
    roster = db.scalars(select(StaffMember).where(StaffMember.user_id == applicant.id)).all()
    assert [m.name for m in roster] == ["Existing"]


def test_failed_roster_insert_rolls_back_whole_approval(client, db, monkeypatch):
    applicant, user_headers = user_with_token(db)
    _, admin_headers = user_with_token(db, role=Role.ADMIN)
    db.add(StaffMember(user_id=applicant.id, name="Existing", role="moderator", position="Helper"))
    db.commit()
    application_id = _submit(client, user_headers)

    # 명단 조회가 기존 항목을 놓친 상황: insert 가 unique 제약에 걸림
    monkeypatch.setattr(application_service, "find_roster_entry", lambda db, user_id: None)

    r = client.patch(f"/api/admin/applications/{application_id}/approve", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Approval conflicted with an existing staff entry"

    db.expire_all()
    application = db.get(StaffApplication, application_id)
    assert application.status == ApplicationStatus.PENDING
    assert application.reviewed_by is None
    assert application.reviewed_at is None
    assert db.get(User, applicant.id).role == Role.USER
    assert db.scalars(select(AdminActionLog)).all() == []
    roster = db.scalars(select(StaffMember).where(StaffMember.user_id == applicant.id)).all()
    assert [m.name for m in roster] == ["Existing"]


def test_reject_then_reapply(client, db):
    applicant, user_headers = user_with_token(db)
    _, admin_headers = user_with_token(db, role=Role.ADMIN)
    application_id = _submit(client, user_headers)

    r = client.patch(f"/api/admin/applications/{application_id}/reject", headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["application"]["status"] == "rejected"

    db.expire_all()
    assert db.get(User, applicant.id).role == Role.USER
    assert db.scalar(select(StaffMember).where(StaffMember.user_id == applicant.id)) is None

    # 종료 상태 지원서만 있으면 다시 지원 가능
    second_id = _submit(client, user_headers)
    assert second_id != application_id


def test_admin_notes_detail_and_filters(client, db):
    applicant, user_headers = user_with_token(db)
    admin, admin_headers = user_with_token(db, role=Role.ADMIN)
    application_id = _submit(client, user_headers)

    notes = client.patch(
        f"/api/admin/applications/{application_id}/notes",
        headers=admin_headers,
        json={"adminNotes": "Interview on Friday"},
    )
    assert notes.status_code == 200, notes.text
    assert notes.json()["application"]["adminNotes"] == "Interview on Friday"
    assert notes.json()["application"]["status"] == "pending"

    detail = client.get(f"/api/admin/applications/{application_id}", headers=admin_headers)
    assert detail.status_code == 200
    assert detail.json()["application"]["applicant"]["username"] == applicant.username
    assert detail.json()["application"]["reviewer"] is None

    pending = client.get("/api/admin/applications", headers=admin_headers, params={"status": "pending"})
    assert [a["id"] for a in pending.json()["items"]] == [application_id]
    approved = client.get("/api/admin/applications", headers=admin_headers, params={"status": "approved"})
    assert approved.json()["items"] == []

    recent = client.get("/api/admin/applications/recent", headers=admin_headers)
    assert recent.status_code == 200
    assert recent.json()["items"][0]["applicant"]["id"] == applicant.id

    missing = client.get("/api/admin/applications/999999", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Application not found"


def test_admin_endpoints_require_admin(client, db):
    _, user_headers = user_with_token(db)
    _, mod_headers = user_with_token(db, role=Role.MODERATOR)
    application_id = _submit(client, user_headers)

    for headers in (user_headers, mod_headers):
        r = client.patch(f"/api/admin/applications/{application_id}/approve", headers=headers)
        assert r.status_code == 403
        assert r.json()["message"] == "Admin access required"

    db.expire_all()
    assert db.get(StaffApplication, application_id).status == ApplicationStatus.PENDING


def test_export_csv_and_xlsx(client, db):
    applicant, user_headers = user_with_token(db)
    _, admin_headers = user_with_token(db, role=Role.ADMIN)
    _submit(client, user_headers, position="Événements")

    r = client.get("/api/admin/applications/export", headers=admin_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="applications_all.csv"' in r.headers["content-disposition"]
    text = r.content.decode("utf-8")
    assert text.startswith("\ufeff")
    lines = text.lstrip("\ufeff").splitlines()
    assert lines[0].startswith("id,username,position,status")
    assert applicant.username in lines[1]
    assert "Événements" in lines[1]

    x = client.get("/api/admin/applications/export.xlsx", headers=admin_headers, params={"status": "pending"})
    assert x.status_code == 200
    wb = load_workbook(io.BytesIO(x.content))
    ws = wb.active
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0][:4] == ("id", "username", "position", "status")
    assert rows[1][1] == applicant.username
    assert rows[1][3] == "pending"
