from conftest import ADMIN_PASSWORD, create_employee, login, login_admin


def test_login_sets_hardened_session_cookie(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "user": {"id": 1, "username": "admin", "role": "admin"}}

    cookie = resp.headers["set-cookie"].lower()
    assert cookie.startswith("token=")
    assert "httponly" in cookie
    assert "secure" in cookie
    assert "samesite=strict" in cookie
    assert "max-age=86400" in cookie


def test_login_failures_are_indistinguishable(client):
    login_admin(client)
    create_employee(client)
    client.post("/api/auth/logout")

    wrong_password = client.post("/api/auth/login", json={"username": "bob", "password": "nope"})
    no_such_user = client.post("/api/auth/login", json={"username": "nobody", "password": "nope"})
    assert wrong_password.status_code == no_such_user.status_code == 401
    assert wrong_password.json() == no_such_user.json() == {
        "error": "Invalid credentials",
        "reason": "invalid_credentials",
    }
    assert "set-cookie" not in wrong_password.headers


def test_username_match_is_case_sensitive(client):
    resp = client.post("/api/auth/login", json={"username": "Admin", "password": ADMIN_PASSWORD})
    assert resp.status_code == 401


def test_me_requires_session(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["reason"] == "unauthorized"


def test_me_returns_current_user(client):
    login_admin(client)
    resp = client.get("/api/auth/me")
    assert resp.status_code == 200
    assert resp.json()["user"] == {"id": 1, "username": "admin", "role": "admin"}


def test_invalid_token_is_unauthorized(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid or expired session"


def test_bearer_header_accepted(client):
    login_admin(client)
    token = client.cookies.get("token")
    client.cookies.clear()
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


def test_logout_expires_cookie(client):
    login_admin(client)
    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert "max-age=0" in resp.headers["set-cookie"].lower()
    assert client.get("/api/auth/me").status_code == 401


def test_change_password_flow(client):
    login_admin(client)
    create_employee(client, "bob", "old-pw")
    login(client, "bob", "old-pw")

    resp = client.post("/api/auth/change-password", json={"currentPassword": "wrong", "newPassword": "new-pw"})
    assert resp.status_code == 400
    assert resp.json()["reason"] == "invalid_current_password"

    resp = client.post("/api/auth/change-password", json={"currentPassword": "old-pw", "newPassword": "new-pw"})
    assert resp.status_code == 200

    client.post("/api/auth/logout")
    assert client.post("/api/auth/login", json={"username": "bob", "password": "old-pw"}).status_code == 401
    login(client, "bob", "new-pw")


def test_change_password_requires_session(client):
    resp = client.post("/api/auth/change-password", json={"currentPassword": "a", "newPassword": "b"})
    assert resp.status_code == 401


def test_deleted_user_session_is_rejected(client, other_client):
    login_admin(client)
    bob_id = create_employee(client)
    login(other_client, "bob", "bob-pw")
    assert other_client.get("/api/auth/me").status_code == 200

    assert client.delete(f"/api/users/{bob_id}").status_code == 200
    assert other_client.get("/api/auth/me").status_code == 401
    assert other_client.get("/api/records").status_code == 401


def test_health(client):
    resp = client.get("/api/health")
    assert resp.json() == {"status": "healthy", "service": "authtracker"}
    assert "x-request-id" in resp.headers
