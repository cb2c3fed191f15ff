from unittest.mock import patch
from uuid import uuid4

import pytest

from sessionlog.core.errors import PersistenceError


@pytest.fixture
def admin_headers(admin, bearer):
    return bearer(admin)


def test_list_shape_and_identity(client, admin_headers, user, make_log):
    entry = make_log(user, ip_address="198.51.100.20", token="tok-a", logout_after=30)

    resp = client.get("/api/v1/user-logs", headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["page"] == 1
    assert body["page_size"] == 20
    log = body["logs"][0]
    assert log["id"] == str(entry.id)
    assert log["user_id"] == str(user.id)
    assert log["full_name"] == "Ana Perez"
    assert log["role"] == "user"
    assert log["login_role"] == "user"
    assert log["token"] == "tok-a"
    assert log["ip_address"] == "198.51.100.20"
    assert log["logout_time"] is not None


def test_pagination(client, admin_headers, user, make_log):
    for i in range(25):
        make_log(user, minutes=i, token=f"tok-{i}")

    pages = [
        client.get("/api/v1/user-logs", params={"page": p}, headers=admin_headers).json()
        for p in (1, 2, 3)
    ]

    assert [len(p["logs"]) for p in pages] == [20, 5, 0]
    assert {p["total"] for p in pages} == {25}
    assert pages[0]["logs"][0]["token"] == "tok-24"
    assert pages[1]["logs"][-1]["token"] == "tok-0"


def test_custom_page_size(client, admin_headers, user, make_log):
    for i in range(7):
        make_log(user, minutes=i)

    body = client.get(
        "/api/v1/user-logs", params={"page": 2, "page_size": 3}, headers=admin_headers
    ).json()

    assert len(body["logs"]) == 3
    assert body["page_size"] == 3
    assert body["total"] == 7


@pytest.mark.parametrize(
    "params",
    [{"page": 0}, {"page": -1}, {"page_size": 0}, {"page_size": 101}, {"page": "abc"}],
)
def test_invalid_paging_rejected(client, admin_headers, params):
    resp = client.get("/api/v1/user-logs", params=params, headers=admin_headers)
    assert resp.status_code == 422


def test_deleted_user_entries_still_listed(client, db_session, admin_headers, make_user, make_log):
    gone = make_user(email="gone@acme.io", full_name="Gone User")
    make_log(gone)
    db_session.delete(gone)
    db_session.commit()

    log = client.get("/api/v1/user-logs", headers=admin_headers).json()["logs"][0]

    assert log["full_name"] is None
    assert log["role"] is None
    assert log["login_role"] == "user"


def test_delete_entry(client, admin_headers, user, make_log):
    entry = make_log(user)
    url = f"/api/v1/user-logs/{entry.id}"

    first = client.delete(url, headers=admin_headers)
    assert first.status_code == 200
    assert first.json() == {"message": "Log deleted successfully"}

    second = client.delete(url, headers=admin_headers)
    assert second.status_code == 404
    assert second.json() == {"detail": "Log not found"}

    listing = client.get("/api/v1/user-logs", headers=admin_headers).json()
    assert listing["total"] == 0


def test_delete_unknown_entry(client, admin_headers):
    resp = client.delete(f"/api/v1/user-logs/{uuid4()}", headers=admin_headers)
    assert resp.status_code == 404


def test_delete_malformed_id(client, admin_headers):
    resp = client.delete("/api/v1/user-logs/not-a-uuid", headers=admin_headers)
    assert resp.status_code == 422


def test_admin_sessions_appear_in_their_own_log(client, db_session, admin):
    login = client.post(
        "/api/v1/auth/login",
        json={"email": "root@acme.io", "password": "correct-horse-42", "role": "admin"},
    )
    token = login.json()["access_token"]

    body = client.get(
        "/api/v1/user-logs", headers={"Authorization": f"Bearer {token}"}
    ).json()

    assert body["total"] == 1
    assert body["logs"][0]["token"] == token
    assert body["logs"][0]["full_name"] == "Site Admin"


def test_store_outage_is_503(client, admin_headers):
    with patch(
        "sessionlog.services.user_log_store.UserLogStore.page",
        side_effect=PersistenceError("Failed to read user log entry"),
    ):
        resp = client.get("/api/v1/user-logs", headers=admin_headers)

    assert resp.status_code == 503
    assert resp.json() == {"detail": "Service temporarily unavailable"}


def test_huge_page_number_is_empty_not_an_error(client, admin_headers, user, make_log):
    make_log(user)

    resp = client.get("/api/v1/user-logs", params={"page": 10**18}, headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["logs"] == []
    assert body["total"] == 1
