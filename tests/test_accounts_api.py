import pytest

from conftest import ADMIN_PASSWORD, auth, login


def new_invite(client, admin_headers):
    response = client.post("/api/admin/invite-codes", headers=admin_headers)
    assert response.status_code == 200
    return response.json()["code"]


def register(client, username, code, password="secret-pass"):
    return client.post(
        "/api/auth/register",
        json={"username": username, "password": password, "inviteCode": code},
    )


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def test_bootstrap_admin_can_log_in(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["username"] == "admin"
    assert body["user"]["is_admin"] is True

    me = client.get("/api/auth/me", headers=auth(body["token"]))
    assert me.json()["username"] == "admin"


def test_bad_credentials(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}

    unknown = client.post("/api/auth/login", json={"username": "ghost", "password": "nope"})
    assert unknown.json() == {"error": "Invalid credentials"}


def test_garbage_bearer_token(client):
    response = client.get("/api/auth/me", headers=auth("not.a.token"))
    assert response.status_code == 401


def test_invite_code_can_be_used_many_times(client, admin_headers):
    code = new_invite(client, admin_headers)
    assert register(client, "carol", code).status_code == 200
    assert register(client, "dave", code).status_code == 200

    codes = client.get("/api/admin/invite-codes", headers=admin_headers).json()
    assert len(codes) == 1
    assert codes[0]["code"] == code
    assert codes[0]["created_by"] == "admin"
    assert codes[0]["use_count"] == 2
    assert sorted(codes[0]["used_by"]) == ["carol", "dave"]


@pytest.mark.parametrize("username, message", [
    ("ab", "Username must be 3-30 characters"),
    ("no spaces", "Username must be 3-30 characters"),
    ("Admin", "This username is reserved"),
    ("login", "This username is reserved"),
])
def test_username_rules(client, admin_headers, username, message):
    response = register(client, username, new_invite(client, admin_headers))
    assert response.status_code == 400
    assert response.json()["error"].startswith(message)


def test_duplicate_username(client, admin_headers):
    code = new_invite(client, admin_headers)
    register(client, "erin", code)
    response = register(client, "erin", code)
    assert response.status_code == 400
    assert response.json() == {"error": "Username already taken"}


def test_unknown_or_disabled_invite(client, admin_headers):
    assert register(client, "frank", "not-a-code").status_code == 400

    code = new_invite(client, admin_headers)
    code_id = client.get("/api/admin/invite-codes", headers=admin_headers).json()[0]["id"]
    toggled = client.put(f"/api/admin/invite-codes/{code_id}", json={"disabled": True}, headers=admin_headers)
    assert toggled.json() == {"success": True, "disabled": True}

    response = register(client, "frank", code)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid or disabled invite code"}


def test_failed_registration_records_no_use(client, admin_headers):
    code = new_invite(client, admin_headers)
    register(client, "api", code)

    codes = client.get("/api/admin/invite-codes", headers=admin_headers).json()
    assert codes[0]["use_count"] == 0


def test_delete_invite_code(client, admin_headers):
    new_invite(client, admin_headers)
    code_id = client.get("/api/admin/invite-codes", headers=admin_headers).json()[0]["id"]

    assert client.delete(f"/api/admin/invite-codes/{code_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/admin/invite-codes", headers=admin_headers).json() == []
    assert client.delete(f"/api/admin/invite-codes/{code_id}", headers=admin_headers).status_code == 404


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

def test_admin_routes_need_admin(client, alice):
    assert client.get("/api/admin/users").status_code == 401
    response = client.get("/api/admin/users", headers=alice)
    assert response.status_code == 403
    assert response.json() == {"error": "Admin access required"}


def test_list_users_with_paste_counts(client, alice, admin_headers):
    client.post("/api/pastes", json={"content": "one"}, headers=alice)
    client.post("/api/pastes", json={"content": "two"}, headers=alice)

    users = {u["username"]: u for u in client.get("/api/admin/users", headers=admin_headers).json()}
    assert users["alice"]["paste_count"] == 2
    assert users["alice"]["is_admin"] is False
    assert users["admin"]["is_admin"] is True


def test_reset_password(client, alice, admin_headers):
    user_id = client.get("/api/auth/me", headers=alice).json()["id"]

    response = client.put(f"/api/admin/users/{user_id}", json={"resetPassword": True}, headers=admin_headers)
    new_password = response.json()["newPassword"]
    assert "-" in new_password

    assert client.post("/api/auth/login", json={"username": "alice", "password": "secret-pass"}).status_code == 401
    assert login(client, "alice", new_password)


def test_promote_user(client, alice, admin_headers):
    user_id = client.get("/api/auth/me", headers=alice).json()["id"]
    client.put(f"/api/admin/users/{user_id}", json={"isAdmin": True}, headers=admin_headers)
    assert client.get("/api/admin/users", headers=alice).status_code == 200


def test_admin_cannot_demote_or_delete_self(client, admin_headers):
    admin_id = client.get("/api/auth/me", headers=admin_headers).json()["id"]

    client.put(f"/api/admin/users/{admin_id}", json={"isAdmin": False}, headers=admin_headers)
    assert client.get("/api/admin/users", headers=admin_headers).status_code == 200

    response = client.delete(f"/api/admin/users/{admin_id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete yourself"}


def test_deleting_user_removes_pastes_and_files(client, alice, admin_headers, settings):
    text_id = client.post("/api/pastes", json={"content": "bye"}, headers=alice).json()["paste"]["id"]
    file_id = client.post(
        "/api/pastes", files={"file": ("a.txt", b"abc", "text/plain")}, headers=alice
    ).json()["paste"]["id"]
    user_id = client.get("/api/auth/me", headers=alice).json()["id"]
    assert len(list(settings.UPLOAD_DIR.iterdir())) == 1

    assert client.delete(f"/api/admin/users/{user_id}", headers=admin_headers).json() == {"success": True}

    assert client.get(f"/api/pastes/{text_id}").status_code == 404
    assert client.get(f"/api/pastes/{file_id}").status_code == 404
    assert list(settings.UPLOAD_DIR.iterdir()) == []
    assert client.get("/api/users/alice").status_code == 404


def test_settings_round_trip(client, admin_headers, alice):
    response = client.put(
        "/api/admin/settings",
        json={"homepage_type": "user_page", "homepage_user": "alice", "max_file_size_mb": 25},
        headers=admin_headers,
    )
    assert response.status_code == 200

    values = client.get("/api/admin/settings", headers=admin_headers).json()
    assert values["homepage_type"] == "user_page"
    assert values["homepage_user"] == "alice"
    assert values["max_file_size_mb"] == "25"
    assert values["max_expiration_days"] == "30"


@pytest.mark.parametrize("body", [
    {"homepage_type": "gallery"},
    {"homepage_user": "nobody-here"},
    {"max_expiration_days": 0},
    {"max_expiration_days": 366},
    {"max_file_size_mb": 101},
])
def test_settings_validation(client, admin_headers, body):
    response = client.put("/api/admin/settings", json=body, headers=admin_headers)
    assert response.status_code == 400
    assert "error" in response.json()


# ---------------------------------------------------------------------------
# Public pages
# ---------------------------------------------------------------------------

def test_user_page_lists_live_pastes(client, alice):
    client.post("/api/pastes", json={"content": "kept", "name": "kept"}, headers=alice)
    client.post("/api/pastes", json={"content": "gone", "expiresIn": 0.000000001}, headers=alice)

    body = client.get("/api/users/alice").json()
    assert body["user"]["username"] == "alice"
    assert [p["name"] for p in body["pastes"]] == ["kept"]
    assert set(body["pastes"][0]) >= {"id", "type", "size", "created_at", "expires_at", "has_password"}


def test_unlock_own_user_page(client, alice):
    response = client.post("/api/users/alice/unlock", json={"password": "secret-pass"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["username"] == "alice"

    me = client.get("/api/auth/me", headers=auth(body["token"]))
    assert me.json()["username"] == "alice"


@pytest.mark.parametrize("path, body, status, message", [
    ("/api/users/alice/unlock", {}, 400, "Password required"),
    ("/api/users/alice/unlock", {"password": "wrong-guess"}, 401, "Invalid password"),
    ("/api/users/nobody/unlock", {"password": "secret-pass"}, 404, "User not found"),
])
def test_unlock_user_page_failures(client, alice, path, body, status, message):
    response = client.post(path, json=body)
    assert response.status_code == status
    assert response.json() == {"error": message}


def test_homepage_user_list(client, alice, bob):
    client.post("/api/pastes", json={"content": "x"}, headers=bob)

    body = client.get("/api/homepage").json()
    assert body["type"] == "user_list"
    counts = {u["username"]: u["paste_count"] for u in body["users"]}
    assert counts == {"alice": 0, "bob": 1}


def test_homepage_redirect(client, alice, admin_headers):
    client.put(
        "/api/admin/settings",
        json={"homepage_type": "user_page", "homepage_user": "alice"},
        headers=admin_headers,
    )
    assert client.get("/api/homepage").json() == {"type": "redirect", "username": "alice"}
