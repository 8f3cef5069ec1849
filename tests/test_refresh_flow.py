# tests/test_refresh_flow.py
from tests.helpers import auth_header, create_user_in_db, login


def test_refresh_token_rotation_and_revocation(client, db):
    user = create_user_in_db(db)

    access1 = login(client, user.username)
    assert access1
    assert "refresh_token" in client.cookies
    refresh1 = client.cookies.get("refresh_token")
    assert refresh1

    r1 = client.post("/api/auth/refresh")
    assert r1.status_code == 200, r1.text
    access2 = r1.json()["accessToken"]
    assert access2
    assert r1.json()["user"]["id"] == user.id

    refresh2 = client.cookies.get("refresh_token")
    assert refresh2 and refresh2 != refresh1

    # 회전 전 토큰 재사용 → 거부
    client.cookies.clear()
    r_old = client.post("/api/auth/refresh", headers={"Cookie": f"refresh_token={refresh1}"})
    assert r_old.status_code == 401
    assert r_old.json()["message"] == "Refresh token revoked"

    client.cookies.clear()
    client.cookies.set("refresh_token", refresh2)
    logout = client.post("/api/auth/logout", headers=auth_header(access2))
    assert logout.status_code == 204

    # 로그아웃 후에는 마지막 refresh 토큰도 무효
    client.cookies.clear()
    after = client.post("/api/auth/refresh", headers={"Cookie": f"refresh_token={refresh2}"})
    assert after.status_code == 401


def test_refresh_without_cookie(client):
    r = client.post("/api/auth/refresh")
    assert r.status_code == 401
    assert r.json()["message"] == "Missing refresh token"


def test_refresh_with_garbage_cookie(client):
    r = client.post("/api/auth/refresh", headers={"Cookie": "refresh_token=garbage"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid refresh token"


def test_access_token_is_not_a_refresh_token(client, db):
    user = create_user_in_db(db)
    access = login(client, user.username)

    client.cookies.clear()
    r = client.post("/api/auth/refresh", headers={"Cookie": f"refresh_token={access}"})
    assert r.status_code == 401
