from unittest.mock import patch

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from sessionlog.core.errors import PersistenceError
from sessionlog.models.user_log import UserLog

PASSWORD = "correct-horse-42"


def _entries(db_session):
    return db_session.execute(select(UserLog).order_by(UserLog.login_time)).scalars().all()


def _login(client, email="ana@acme.io", password=PASSWORD, **extra):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password, **extra})


def test_register_logs_new_user_in(client, db_session):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "new@acme.io", "full_name": "New Person", "password": "long-enough-pw"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "user"
    assert body["user"]["email"] == "new@acme.io"

    rows = _entries(db_session)
    assert len(rows) == 1
    assert rows[0].token == body["access_token"]
    assert str(rows[0].user_id) == body["user"]["id"]


def test_register_duplicate(client, user):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "ana@acme.io", "full_name": "Ana Again", "password": "long-enough-pw"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"detail": "User already exists"}


def test_register_rejects_short_password(client):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "new@acme.io", "full_name": "New Person", "password": "short"},
    )
    assert resp.status_code == 422


def test_login_opens_session(client, db_session, user):
    resp = _login(client)

    assert resp.status_code == 200
    token = resp.json()["access_token"]
    rows = _entries(db_session)
    assert len(rows) == 1
    assert rows[0].token == token
    assert rows[0].user_id == user.id
    assert rows[0].role == "user"
    assert rows[0].ip_address == "testclient"
    assert rows[0].logout_time is None


def test_login_records_forwarded_ip_is_ignored_from_untrusted_peer(client, db_session, user):
    resp = client.post(
        "/api/v1/auth/login",
        json={"email": "ana@acme.io", "password": PASSWORD},
        headers={"X-Forwarded-For": "198.51.100.77"},
    )
    assert resp.status_code == 200
    assert _entries(db_session)[0].ip_address == "testclient"


def test_each_login_is_a_separate_session(client, db_session, user):
    first = _login(client).json()["access_token"]
    second = _login(client).json()["access_token"]

    assert first != second
    assert [row.token for row in _entries(db_session)] == [first, second]


def test_invalid_credentials_are_uniform(client, user):
    unknown = _login(client, email="ghost@acme.io")
    wrong = _login(client, password="not-the-password")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"detail": "Invalid credentials"}


def test_failed_login_records_nothing(client, db_session, user):
    _login(client, password="not-the-password")
    assert _entries(db_session) == []


def test_role_hint_mismatch(client, db_session, user):
    resp = _login(client, role="admin")

    assert resp.status_code == 403
    assert resp.json() == {"detail": "Unauthorized login attempt"}
    assert _entries(db_session) == []


def test_unknown_role_hint_is_rejected(client, user):
    assert _login(client, role="superuser").status_code == 422


def test_admin_login_with_role_hint(client, db_session, admin):
    resp = _login(client, email="root@acme.io", role="admin")

    assert resp.status_code == 200
    assert _entries(db_session)[0].role == "admin"


def test_logout_closes_session_and_is_idempotent(client, db_session, user):
    token = _login(client).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    first = client.post("/api/v1/auth/logout", headers=headers)
    assert first.status_code == 200
    assert first.json() == {"message": "Logged out successfully"}

    entry = _entries(db_session)[0]
    closed_at = entry.logout_time
    assert closed_at is not None

    second = client.post("/api/v1/auth/logout", headers=headers)
    assert second.status_code == 200
    db_session.refresh(entry)
    assert entry.logout_time == closed_at


def test_logout_closes_only_presented_token(client, db_session, user):
    t1 = _login(client).json()["access_token"]
    t2 = _login(client).json()["access_token"]

    client.post("/api/v1/auth/logout", headers={"Authorization": f"Bearer {t1}"})

    by_token = {row.token: row for row in _entries(db_session)}
    assert by_token[t1].logout_time is not None
    assert by_token[t2].logout_time is None


def test_logout_without_recorded_session(client, user, bearer):
    resp = client.post("/api/v1/auth/logout", headers=bearer(user))
    assert resp.status_code == 200


def test_login_survives_audit_outage(client, db_session, user):
    with patch(
        "sessionlog.services.user_log_store.UserLogStore.insert",
        side_effect=PersistenceError("Failed to create user log entry"),
    ):
        resp = _login(client)

    assert resp.status_code == 200
    assert resp.json()["access_token"]
    assert _entries(db_session) == []


def test_me(client, user, bearer):
    resp = client.get("/api/v1/auth/me", headers=bearer(user))

    assert resp.status_code == 200
    assert resp.json()["email"] == "ana@acme.io"
    assert resp.json()["id"] == str(user.id)


def test_health_and_request_id(client):
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in resp.headers


def test_login_store_failure_is_503(client, db_session, user):
    failure = OperationalError("UPDATE users", {}, Exception("connection refused"))

    with patch.object(db_session, "commit", side_effect=failure):
        resp = _login(client)

    assert resp.status_code == 503
    assert resp.json() == {"detail": "Service temporarily unavailable"}
