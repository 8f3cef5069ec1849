"""
콘텐츠(뉴스 / 가이드라인 / 운영진 명단 / 미디어 / 캐릭터) API 테스트.
- 관리자 CRUD 와 공개 API 노출 규칙(게시 여부 / 활성 / 승인) 검증
- slug 자동 생성 및 중복 처리
"""

from app.models.user import Role
from tests.helpers import user_with_token


# ---- 뉴스 ----

def test_news_crud_and_slug_rules(client, db):
    _, admin = user_with_token(db, role=Role.ADMIN)

    first = client.post("/api/admin/news", headers=admin, json={"title": "Server Update!", "content": "Patch notes"})
    assert first.status_code == 201, first.text
    assert first.json()["article"]["slug"] == "server-update"

    second = client.post("/api/admin/news", headers=admin, json={"title": "Server update", "content": "More"})
    assert second.status_code == 201, second.text
    assert second.json()["article"]["slug"] == "server-update-2"

    explicit = client.post(
        "/api/admin/news", headers=admin, json={"title": "Other", "slug": "server-update", "content": "x"}
    )
    assert explicit.status_code == 400
    assert explicit.json()["message"] == "Slug already in use"

    article_id = first.json()["article"]["id"]
    renamed = client.put(f"/api/admin/news/{article_id}", headers=admin, json={"title": "Renamed"})
    assert renamed.status_code == 200, renamed.text
    assert renamed.json()["article"]["title"] == "Renamed"
    # 제목만 바꾸면 slug 유지
    assert renamed.json()["article"]["slug"] == "server-update"

    public = client.get("/api/news/server-update")
    assert public.status_code == 200
    assert public.json()["article"]["title"] == "Renamed"
    assert public.json()["article"]["author"]["role"] == "admin"

    deleted = client.delete(f"/api/admin/news/{article_id}", headers=admin)
    assert deleted.status_code == 204
    assert client.get("/api/news/server-update").status_code == 404


def test_unpublished_news_hidden_from_public(client, db):
    _, admin = user_with_token(db, role=Role.ADMIN)

    client.post("/api/admin/news", headers=admin, json={"title": "Draft", "content": "x", "published": False})
    client.post("/api/admin/news", headers=admin, json={"title": "Live", "content": "x", "featured": True})

    public = client.get("/api/news").json()["items"]
    assert [a["slug"] for a in public] == ["live"]
    assert client.get("/api/news/draft").status_code == 404
    assert [a["slug"] for a in client.get("/api/news/featured").json()["items"]] == ["live"]

    everything = client.get("/api/admin/news", headers=admin).json()["items"]
    assert {a["slug"] for a in everything} == {"draft", "live"}


def test_news_categories(client, db):
    _, admin = user_with_token(db, role=Role.ADMIN)

    cat = client.post("/api/admin/news/categories", headers=admin, json={"name": "Patch Notes", "color": "#ff0000"})
    assert cat.status_code == 201, cat.text
    category = cat.json()["category"]
    assert category["slug"] == "patch-notes"

    missing = client.post("/api/admin/news", headers=admin, json={"title": "T", "content": "c", "categoryId": 999999})
    assert missing.status_code == 400
    assert missing.json()["message"] == "Category not found"

    client.post("/api/admin/news", headers=admin, json={"title": "In category", "content": "c", "categoryId": category["id"]})
    client.post("/api/admin/news", headers=admin, json={"title": "Uncategorised", "content": "c"})

    filtered = client.get("/api/news", params={"category": "patch-notes"}).json()["items"]
    assert [a["slug"] for a in filtered] == ["in-category"]
    assert filtered[0]["category"]["name"] == "Patch Notes"

    assert [c["slug"] for c in client.get("/api/news/categories").json()["items"]] == ["patch-notes"]

    deleted = client.delete(f"/api/admin/news/categories/{category['id']}", headers=admin)
    assert deleted.status_code == 204
    article = client.get("/api/news/in-category").json()["article"]
    assert article["categoryId"] is None


def test_news_admin_requires_admin(client, db):
    _, user = user_with_token(db)
    _, moderator = user_with_token(db, role=Role.MODERATOR)

    for headers in (user, moderator):
        r = client.post("/api/admin/news", headers=headers, json={"title": "x", "content": "y"})
        assert r.status_code == 403
    assert client.post("/api/admin/news", json={"title": "x", "content": "y"}).status_code == 401


# ---- 가이드라인 ----

def test_guidelines_visibility_and_order(client, db):
    _, admin = user_with_token(db, role=Role.ADMIN)

    client.post(
        "/api/admin/guidelines", headers=admin,
        json={"title": "Second rule", "content": "b", "displayOrder": 2, "isPublished": True},
    )
    first = client.post(
        "/api/admin/guidelines", headers=admin,
        json={"title": "First rule", "content": "a", "displayOrder": 1, "isPublished": True},
    )
    assert first.status_code == 201, first.text
    client.post("/api/admin/guidelines", headers=admin, json={"title": "Hidden", "content": "c"})
    client.post(
        "/api/admin/guidelines", headers=admin,
        json={"title": "How to join", "type": "faq", "content": "d", "isPublished": True},
    )

    rules = client.get("/api/guidelines", params={"type": "rules"}).json()["items"]
    assert [g["slug"] for g in rules] == ["first-rule", "second-rule"]

    by_slug = client.get("/api/guidelines/slug/how-to-join")
    assert by_slug.status_code == 200
    assert by_slug.json()["guideline"]["type"] == "faq"

    assert client.get("/api/guidelines/slug/hidden").status_code == 404

    guideline_id = first.json()["guideline"]["id"]
    assert client.get(f"/api/guidelines/{guideline_id}").status_code == 200

    admin_items = client.get("/api/admin/guidelines", headers=admin).json()["items"]
    assert len(admin_items) == 4


def test_guideline_update_records_editor(client, db):
    admin_user, admin = user_with_token(db, role=Role.ADMIN)
    created = client.post("/api/admin/guidelines", headers=admin, json={"title": "Rule", "content": "a"})
    guideline_id = created.json()["guideline"]["id"]

    r = client.put(
        f"/api/admin/guidelines/{guideline_id}", headers=admin,
        json={"content": "updated", "isPublished": True, "slug": "Custom Slug"},
    )
    assert r.status_code == 200, r.text
    body = r.json()["guideline"]
    assert body["content"] == "updated"
    assert body["slug"] == "custom-slug"
    assert body["lastUpdatedBy"] == admin_user.id

    assert client.delete(f"/api/admin/guidelines/{guideline_id}", headers=admin).status_code == 204
    assert client.get(f"/api/guidelines/{guideline_id}").status_code == 404


# ---- 운영진 명단 ----

def test_staff_roster_crud(client, db):
    member_user, user_headers = user_with_token(db, role=Role.MODERATOR)
    _, admin = user_with_token(db, role=Role.ADMIN)

    created = client.post(
        "/api/admin/staff", headers=admin,
        json={
            "userId": member_user.id,
            "name": "Alex",
            "role": "moderator",
            "position": "Event lead",
            "socialLinks": {"twitter": "https://twitter.com/alex"},
        },
    )
    assert created.status_code == 201, created.text
    member = created.json()["member"]
    assert member["displayOrder"] == 999
    assert member["isActive"] is True

    duplicate = client.post(
        "/api/admin/staff", headers=admin,
        json={"userId": member_user.id, "name": "Alex 2", "role": "moderator", "position": "x"},
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "User already has a staff entry"

    client.post("/api/admin/staff", headers=admin, json={"name": "Sam", "role": "support", "position": "Helper"})

    hidden = client.put(f"/api/admin/staff/{member['id']}", headers=admin, json={"isActive": False})
    assert hidden.status_code == 200, hidden.text

    public = client.get("/api/staff").json()["items"]
    assert [m["name"] for m in public] == ["Sam"]
    assert len(client.get("/api/admin/staff", headers=admin).json()["items"]) == 2

    detail = client.get(f"/api/admin/staff/{member['id']}", headers=admin)
    assert detail.status_code == 200, detail.text
    assert detail.json()["member"]["name"] == "Alex"
    assert detail.json()["member"]["isActive"] is False
    assert client.get(f"/api/admin/staff/{member['id']}", headers=user_headers).status_code == 403

    assert client.delete(f"/api/admin/staff/{member['id']}", headers=admin).status_code == 204
    assert client.delete(f"/api/admin/staff/{member['id']}", headers=admin).status_code == 404


# ---- 미디어 ----

def test_media_submission_requires_approval(client, db):
    submitter, user = user_with_token(db)
    _, admin = user_with_token(db, role=Role.ADMIN)

    assert client.post("/api/media", json={"title": "x", "url": "https://img"}).status_code == 401

    submitted = client.post(
        "/api/media", headers=user,
        json={"title": "Sunset", "url": "https://example.com/sunset.png", "approved": True},
    )
    assert submitted.status_code == 201, submitted.text
    media = submitted.json()["media"]
    # 사용자가 approved 를 보내도 무시
    assert media["approved"] is False
    assert media["userId"] == submitter.id
    assert media["type"] == "image"

    assert client.get("/api/media").json()["items"] == []
    # 승인 전: 공개 단건 조회는 404, 관리자 조회는 가능
    assert client.get(f"/api/media/{media['id']}").status_code == 404
    admin_view = client.get(f"/api/admin/media/{media['id']}", headers=admin)
    assert admin_view.status_code == 200
    assert admin_view.json()["media"]["approved"] is False
    assert client.get(f"/api/admin/media/{media['id']}", headers=user).status_code == 403
    pending = client.get("/api/admin/media", headers=admin, params={"approved": "false"}).json()["items"]
    assert [m["id"] for m in pending] == [media["id"]]

    approved = client.patch(f"/api/admin/media/{media['id']}/approve", headers=admin)
    assert approved.status_code == 200
    assert approved.json()["media"]["approved"] is True

    public = client.get("/api/media").json()["items"]
    assert [m["title"] for m in public] == ["Sunset"]
    public_item = client.get(f"/api/media/{media['id']}")
    assert public_item.status_code == 200
    assert public_item.json()["media"]["title"] == "Sunset"

    bad_type = client.post("/api/media", headers=user, json={"title": "x", "url": "https://v", "type": "audio"})
    assert bad_type.status_code == 400

    assert client.delete(f"/api/admin/media/{media['id']}", headers=admin).status_code == 204
    assert client.get("/api/media").json()["items"] == []
    assert client.get(f"/api/admin/media/{media['id']}", headers=admin).status_code == 404


# ---- 캐릭터 ----

def test_characters_use_class_field(client, db):
    _, admin = user_with_token(db, role=Role.ADMIN)

    created = client.post(
        "/api/admin/characters", headers=admin,
        json={
            "name": "Aria",
            "class": "Ranger",
            "race": "Elf",
            "level": 12,
            "stats": {"strength": 10, "dexterity": 18},
            "skills": [{"name": "Archery", "level": 80}],
        },
    )
    assert created.status_code == 201, created.text
    character = created.json()["character"]
    assert character["class"] == "Ranger"
    assert character["stats"]["dexterity"] == 18
    assert character["currentXp"] == 0
    assert character["nextLevelXp"] == 100

    client.post(
        "/api/admin/characters", headers=admin,
        json={"name": "Secret", "class": "Rogue", "race": "Human", "isPublished": False},
    )

    public = client.get("/api/characters").json()["items"]
    assert [c["name"] for c in public] == ["Aria"]

    updated = client.put(f"/api/admin/characters/{character['id']}", headers=admin, json={"class": "Warden"})
    assert updated.status_code == 200, updated.text
    assert updated.json()["character"]["class"] == "Warden"
    assert updated.json()["character"]["race"] == "Elf"

    detail = client.get(f"/api/characters/{character['id']}")
    assert detail.json()["character"]["class"] == "Warden"
