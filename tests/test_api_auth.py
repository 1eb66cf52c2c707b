"""API-level tests for login, registration and the role gate."""
from datetime import datetime, timedelta, timezone

from jose import jwt

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, login


def test_login_returns_token_and_user_without_password(client):
    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    data = resp.json()

    assert data["token"]
    assert data["user"]["email"] == ADMIN_EMAIL
    assert data["user"]["role"] == "admin"
    assert "password" not in data["user"]


def test_login_with_wrong_password(client):
    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"


def test_me_returns_claims(client, admin_headers):
    resp = client.get("/auth/me", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == ADMIN_EMAIL
    assert resp.json()["role"] == "admin"


def test_missing_invalid_and_expired_tokens_are_unauthorized(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401

    expired = jwt.encode(
        {
            "id": 1,
            "sub": "1",
            "name": "Admin",
            "email": ADMIN_EMAIL,
            "role": "admin",
            "exp": datetime.now(tz=timezone.utc) - timedelta(minutes=1),
        },
        "test-secret",
        algorithm="HS256",
    )
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token expired"


def test_register_is_admin_only(client, admin_headers, cashier_headers):
    payload = {"name": "Other", "email": "other@brew.local", "password": "secret1"}
    assert client.post("/auth/register", json=payload, headers=cashier_headers).status_code == 403

    resp = client.post("/auth/register", json=payload, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["user"]["role"] == "cashier"


def test_register_duplicate_email_conflicts(client, admin_headers):
    payload = {"name": "Dup", "email": "Admin@Brew.local", "password": "secret1"}
    resp = client.post("/auth/register", json=payload, headers=admin_headers)
    assert resp.status_code == 409


def test_list_users(client, admin_headers, cashier_headers):
    resp = client.get("/auth/users", headers=admin_headers)
    assert resp.status_code == 200
    assert {u["email"] for u in resp.json()} == {ADMIN_EMAIL, "kasir@brew.local"}

    assert client.get("/auth/users", headers=cashier_headers).status_code == 403


def test_cashier_can_update_own_profile_and_password(client, cashier_headers):
    me = client.get("/auth/me", headers=cashier_headers).json()

    resp = client.patch(
        f"/auth/users/{me['id']}",
        json={"name": "Kasir Baru", "password": "changed1"},
        headers=cashier_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Kasir Baru"
    login(client, "kasir@brew.local", "changed1")


def test_cashier_cannot_change_role_or_edit_others(client, cashier_headers):
    me = client.get("/auth/me", headers=cashier_headers).json()

    resp = client.patch(f"/auth/users/{me['id']}", json={"role": "admin"}, headers=cashier_headers)
    assert resp.status_code == 403
    resp = client.patch("/auth/users/1", json={"name": "Hacked"}, headers=cashier_headers)
    assert resp.status_code == 403


def test_admin_can_promote_user(client, admin_headers, cashier_headers):
    me = client.get("/auth/me", headers=cashier_headers).json()
    resp = client.patch(f"/auth/users/{me['id']}", json={"role": "admin"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"


def test_admin_cannot_delete_self(client, admin_headers):
    me = client.get("/auth/me", headers=admin_headers).json()
    resp = client.delete(f"/auth/users/{me['id']}", headers=admin_headers)
    assert resp.status_code == 400


def test_admin_deletes_other_user(client, admin_headers, cashier_headers):
    me = client.get("/auth/me", headers=cashier_headers).json()
    assert client.delete(f"/auth/users/{me['id']}", headers=cashier_headers).status_code == 403

    assert client.delete(f"/auth/users/{me['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/auth/users/{me['id']}", headers=admin_headers).status_code == 404
