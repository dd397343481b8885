import pytest

from conftest import auth, register

pytestmark = pytest.mark.unit


def test_admin_lists_users_without_password_fields(client, admin_token):
    register(client, "u1@x.com")
    register(client, "u2@x.com")

    r = client.get("/api/users", headers=auth(admin_token))

    assert r.status_code == 200
    users = r.json()
    assert {u["email"] for u in users} == {"admin@example.com", "u1@x.com", "u2@x.com"}
    for u in users:
        assert not any("password" in k.lower() for k in u)


def test_admin_list_filters_by_status(client, admin_token):
    _, u1 = register(client, "u1@x.com")
    register(client, "u2@x.com")
    client.patch(f"/api/users/{u1['id']}/status", json={"status": "blocked"}, headers=auth(admin_token))

    r = client.get("/api/users", params={"status": "blocked"}, headers=auth(admin_token))
    assert [u["email"] for u in r.json()] == ["u1@x.com"]

    assert client.get("/api/users", params={"status": "zombie"}, headers=auth(admin_token)).status_code == 400


def test_admin_changes_role(client, admin_token):
    token, user = register(client, "vol@x.com")

    r = client.patch(f"/api/users/{user['id']}/role", json={"role": "volunteer"}, headers=auth(admin_token))

    assert r.status_code == 200
    assert r.json()["role"] == "volunteer"
    assert client.get("/api/auth/me", headers=auth(token)).json()["user"]["role"] == "volunteer"


def test_role_and_status_values_are_validated(client, admin_token):
    _, user = register(client, "v@x.com")

    assert client.patch(
        f"/api/users/{user['id']}/role", json={"role": "superuser"}, headers=auth(admin_token)
    ).status_code == 400
    assert client.patch(
        f"/api/users/{user['id']}/status", json={"status": "deleted"}, headers=auth(admin_token)
    ).status_code == 400


def test_admin_endpoints_404_for_missing_user(client, admin_token):
    r = client.patch("/api/users/9999/status", json={"status": "blocked"}, headers=auth(admin_token))
    assert r.status_code == 404


def test_user_ids_outside_key_range_are_404(client, admin_token):
    huge = "99999999999999999999"

    status = client.patch(f"/api/users/{huge}/status", json={"status": "blocked"}, headers=auth(admin_token))
    role = client.patch(f"/api/users/{huge}/role", json={"role": "volunteer"}, headers=auth(admin_token))
    profile = client.put(f"/api/users/{huge}", json={"name": "Nobody"}, headers=auth(admin_token))

    assert status.status_code == 404
    assert role.status_code == 404
    assert profile.status_code == 404
    assert profile.json() == {"message": "User not found"}


def test_non_admin_cannot_change_roles(client):
    token, user = register(client, "sneaky@x.com")

    r = client.patch(f"/api/users/{user['id']}/role", json={"role": "admin"}, headers=auth(token))
    assert r.status_code == 403


def test_user_updates_own_profile(client):
    token, user = register(client, "me@x.com", name="Old")

    r = client.put(
        f"/api/users/{user['id']}",
        json={"name": "New Name", "bloodGroup": "b+", "district": "Sylhet", "subDistrict": "Beanibazar"},
        headers=auth(token),
    )

    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "New Name"
    assert body["bloodGroup"] == "B+"
    assert body["district"] == "Sylhet"
    assert body["subDistrict"] == "Beanibazar"
    assert body["email"] == "me@x.com"
    assert not any("password" in k.lower() for k in body)


def test_partial_profile_update_keeps_other_fields(client):
    token, user = register(client, "me@x.com", name="Keep", district="Khulna")

    r = client.put(f"/api/users/{user['id']}", json={"avatar": "https://img/x.png"}, headers=auth(token))

    assert r.json()["name"] == "Keep"
    assert r.json()["district"] == "Khulna"
    assert r.json()["avatar"] == "https://img/x.png"


def test_user_cannot_update_someone_else(client):
    token, _ = register(client, "a@x.com")
    _, other = register(client, "b@x.com")

    r = client.put(f"/api/users/{other['id']}", json={"name": "Hacked"}, headers=auth(token))
    assert r.status_code == 403


def test_admin_can_update_anyone(client, admin_token):
    _, other = register(client, "b@x.com")

    r = client.put(f"/api/users/{other['id']}", json={"name": "Fixed"}, headers=auth(admin_token))
    assert r.status_code == 200
    assert r.json()["name"] == "Fixed"


def test_profile_update_cannot_escalate_role(client):
    token, user = register(client, "me@x.com")

    r = client.put(f"/api/users/{user['id']}", json={"role": "admin"}, headers=auth(token))

    assert r.status_code == 400
    assert client.get("/api/auth/me", headers=auth(token)).json()["user"]["role"] == "donor"
