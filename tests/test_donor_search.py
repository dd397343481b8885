import pytest

from conftest import auth, register

pytestmark = pytest.mark.unit


@pytest.fixture
def donors(client, admin_token):
    register(client, "d1@x.com", name="Anika", bloodGroup="A+", district="Dhaka", subDistrict="Mirpur")
    register(client, "d2@x.com", name="Babul", bloodGroup="B+", district="Narayanganj", subDistrict="Sonargaon")
    register(client, "d3@x.com", name="Chitra", bloodGroup="A+", district="Chattogram", subDistrict="Patiya")
    _, blocked = register(client, "d4@x.com", name="Dipu", bloodGroup="A+", district="Dhaka", subDistrict="Uttara")
    client.patch(f"/api/users/{blocked['id']}/status", json={"status": "blocked"}, headers=auth(admin_token))


def _emails(resp):
    assert resp.status_code == 200, resp.text
    return {u["email"] for u in resp.json()}


def test_no_filters_returns_only_active(client, donors):
    found = _emails(client.get("/api/donors/search"))

    assert "d4@x.com" not in found
    assert {"d1@x.com", "d2@x.com", "d3@x.com"} <= found


def test_district_is_case_insensitive_substring(client, donors):
    assert _emails(client.get("/api/donors/search", params={"district": "DHAKA"})) == {"d1@x.com"}
    assert _emails(client.get("/api/donors/search", params={"district": "gan"})) == {"d2@x.com"}


def test_sub_district_and_blood_group(client, donors):
    assert _emails(client.get("/api/donors/search", params={"bloodGroup": "A+"})) == {"d1@x.com", "d3@x.com"}
    assert _emails(
        client.get("/api/donors/search", params={"bloodGroup": "A+", "subDistrict": "pati"})
    ) == {"d3@x.com"}


def test_like_wildcards_are_literal(client, donors):
    assert _emails(client.get("/api/donors/search", params={"district": "%"})) == set()
    assert _emails(client.get("/api/donors/search", params={"district": "_"})) == set()


def test_invalid_blood_group_is_400(client):
    r = client.get("/api/donors/search", params={"bloodGroup": "XY"})
    assert r.status_code == 400


def test_results_are_public_users(client, donors):
    for u in client.get("/api/donors/search").json():
        assert not any("password" in k.lower() for k in u)
