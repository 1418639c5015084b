# HTTP tests for /api/users
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from users_api.services.user_service import UserService

PUBLIC_KEYS = {"id", "name", "email", "createdAt", "updatedAt"}


def _post_user(client, email="a@x.com", name="A", password="secret1"):
    return client.post("/api/users", json={"email": email, "name": name, "password": password})


def test_create_user(client):
    response = _post_user(client)

    assert response.status_code == 201
    body = response.json()
    assert set(body) == PUBLIC_KEYS
    assert body["email"] == "a@x.com"
    assert body["name"] == "A"
    assert body["id"]


def test_create_user_invalid_email(client):
    response = _post_user(client, email="not-an-email")

    assert response.status_code == 422


def test_create_user_missing_password(client):
    response = client.post("/api/users", json={"email": "a@x.com", "name": "A"})

    assert response.status_code == 422


def test_create_user_duplicate_email(client):
    _post_user(client)

    response = _post_user(client, name="Other")

    assert response.status_code == 409
    assert "error" in response.json()


def test_list_users(client):
    _post_user(client, email="a@x.com")
    _post_user(client, email="b@x.com", name="B")

    response = client.get("/api/users")

    assert response.status_code == 200
    users = response.json()
    assert len(users) == 2
    for user in users:
        assert set(user) == PUBLIC_KEYS


def test_list_users_empty(client):
    response = client.get("/api/users")

    assert response.status_code == 200
    assert response.json() == []


def test_get_user(client):
    user_id = _post_user(client).json()["id"]

    response = client.get(f"/api/users/{user_id}")

    assert response.status_code == 200
    body = response.json()
    assert set(body) == PUBLIC_KEYS
    assert body["email"] == "a@x.com"


def test_get_user_not_found(client):
    response = client.get("/api/users/missing")

    assert response.status_code == 404
    assert response.json() == {"error": "User missing not found"}


def test_update_user(client):
    user_id = _post_user(client).json()["id"]

    response = client.patch(f"/api/users/{user_id}", json={"name": "Renamed"})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == PUBLIC_KEYS
    assert body["name"] == "Renamed"
    assert body["email"] == "a@x.com"


def test_update_user_password(client, app):
    user_id = _post_user(client).json()["id"]

    response = client.patch(f"/api/users/{user_id}", json={"password": "secret2"})
    assert response.status_code == 200

    db = app.state.database.session()
    try:
        service = UserService(db, app.state.password_hasher)
        assert service.verify_password(user_id, "secret2")
        assert not service.verify_password(user_id, "secret1")
    finally:
        db.close()


def test_update_user_not_found(client):
    response = client.patch("/api/users/missing", json={"name": "X"})

    assert response.status_code == 404


def test_delete_user(client):
    user_id = _post_user(client).json()["id"]

    response = client.delete(f"/api/users/{user_id}")
    assert response.status_code == 204
    assert response.content == b""

    assert client.get(f"/api/users/{user_id}").status_code == 404


def test_delete_user_not_found(client):
    response = client.delete("/api/users/missing")

    assert response.status_code == 404
    assert "error" in response.json()


def test_store_outage_returns_503(client):
    outage = OperationalError("SELECT 1", {}, Exception("connection refused"))

    with patch.object(Session, "query", side_effect=outage):
        response = client.get("/api/users")

    assert response.status_code == 503
    assert response.json() == {"error": "Database unavailable"}


def test_hashing_failure_returns_500(client):
    with patch("users_api.security.bcrypt.hashpw", side_effect=ValueError("boom")):
        response = _post_user(client)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to hash password"}


def test_unexpected_error_returns_generic_500(app):
    with patch.object(UserService, "find_all", side_effect=RuntimeError("boom")):
        with TestClient(app, raise_server_exceptions=False) as c:
            response = c.get("/api/users")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_health_database_down(client, app):
    with patch.object(app.state.database, "ping", return_value=False):
        response = client.get("/api/health")

    assert response.json()["database"] == "unavailable"


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_create_user_name_too_long(client):
    response = _post_user(client, name="x" * 300)

    assert response.status_code == 422
    assert client.get("/api/users").json() == []


def test_create_user_email_too_long(client):
    response = _post_user(client, email="a" * 250 + "@x.com")

    assert response.status_code == 422


def test_update_user_name_too_long(client):
    user_id = _post_user(client).json()["id"]

    response = client.patch(f"/api/users/{user_id}", json={"name": "x" * 256})

    assert response.status_code == 422
    assert client.get(f"/api/users/{user_id}").json()["name"] == "A"


def test_name_at_column_limit_is_accepted(client):
    response = _post_user(client, name="x" * 255)

    assert response.status_code == 201
