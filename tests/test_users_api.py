# tests/test_users_api.py
from conftest import PASSWORD, make_user


def test_list_users_is_admin_only(client, user_headers, admin_headers):
    assert client.get("/api/users", headers=user_headers).status_code == 403

    res = client.get("/api/users", headers=admin_headers)
    assert res.status_code == 200
    emails = {u["email"] for u in res.json()}
    assert emails == {"shopper@example.com", "admin@example.com"}
    assert all("password" not in u for u in res.json())


def test_get_user(client, user, admin_headers):
    res = client.get(f"/api/users/{user.id}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["is_active"] is True

    res = client.get("/api/users/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert res.status_code == 404


def test_promote_user_to_admin(client, user, user_headers, admin_headers):
    res = client.patch(f"/api/users/{user.id}/role", json={"role": "admin"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["role"] == "admin"

    # the promoted user now passes admin checks with the same token
    assert client.get("/api/dashboard/stats", headers=user_headers).status_code == 200


def test_role_must_be_known(client, user, admin_headers):
    res = client.patch(f"/api/users/{user.id}/role", json={"role": "owner"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["field"] == "role"


def test_admin_cannot_demote_self(client, admin, admin_headers):
    res = client.patch(f"/api/users/{admin.id}/role", json={"role": "user"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["field"] == "role"


def test_deactivated_user_cannot_log_in(client, user, admin_headers):
    res = client.patch(f"/api/users/{user.id}/status", json={"is_active": False}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["is_active"] is False

    res = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert res.status_code == 403


def test_admin_cannot_deactivate_self(client, admin, admin_headers):
    res = client.patch(f"/api/users/{admin.id}/status", json={"is_active": False}, headers=admin_headers)
    assert res.status_code == 400


def test_reactivate(client, admin_headers):
    dormant = make_user(email="dormant@example.com", is_active=False)
    res = client.patch(f"/api/users/{dormant.id}/status", json={"is_active": True}, headers=admin_headers)
    assert res.json()["is_active"] is True
