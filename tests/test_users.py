from jose import jwt

from app.core.config import settings
from app.utils.jwt import create_access_token
from datetime import timedelta


def test_root_and_health(client):
    assert "Welcome" in client.get("/").json()["message"]

    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"] == settings.APP_VERSION
    assert body["catalog"]["using_free_tier"] is True
    assert "timestamp" in body


def test_register_user(client):
    response = client.post("/auth/register", json={
        "username": "Ann",
        "email": "ann@example.com",
        "password": "123456",
        "firstname": "Ann",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "Bearer"
    assert body["expires_in"] > 0
    assert body["user"]["username"] == "Ann"
    assert body["user"]["role"] == "USER"

    claims = jwt.decode(body["access_token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == str(body["user"]["id"])
    assert claims["email"] == "ann@example.com"
    assert claims["username"] == "Ann"
    assert claims["role"] == "USER"
    assert "iat" in claims and "exp" in claims


def test_register_duplicate(client, register):
    register("ann")
    response = client.post("/auth/register", json={
        "username": "ann",
        "email": "other@example.com",
        "password": "123456",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"

    response = client.post("/auth/register", json={
        "username": "other",
        "email": "ann@example.com",
        "password": "123456",
    })
    assert response.status_code == 409


def test_register_validation(client):
    response = client.post("/auth/register", json={
        "username": "Ann",
        "email": "not-an-email",
        "password": "123",
    })
    assert response.status_code == 422


def test_login(client, register):
    register("ann", password="secret123")

    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "ann@example.com"

    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "wrong-one"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"
    assert response.headers["www-authenticate"] == "Bearer"

    response = client.post("/auth/login", json={"email": "nobody@example.com", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_deactivated(client, register, set_role):
    _, body = register("ann", password="secret123")
    set_role(body["user"]["id"], role="USER", is_active=False)

    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is deactivated"


def test_profile_and_validate(client, register):
    headers, body = register("ann")

    response = client.get("/auth/profile", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == body["user"]["id"]
    assert "password_hash" not in response.json()

    response = client.get("/auth/validate", headers=headers)
    assert response.json() == {"message": "Token is valid", "valid": True}


def test_missing_or_bad_token(client, register):
    response = client.get("/auth/profile")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    response = client.get("/auth/profile", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401

    _, body = register("ann")
    token, _ = create_access_token(body["user"]["id"], expires_delta=timedelta(seconds=-5))
    response = client.get("/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"

    token, _ = create_access_token(9999)
    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_update_my_profile(client, register):
    headers, _ = register("ann", password="secret123")

    response = client.patch("/users/me", headers=headers, json={
        "firstname": "Anna",
        "avatar": "https://example.com/avatar.jpg",
    })
    assert response.status_code == 200
    assert response.json()["firstname"] == "Anna"
    assert response.json()["avatar"] == "https://example.com/avatar.jpg"


def test_change_password_requires_current(client, register):
    headers, _ = register("ann", password="secret123")

    response = client.patch("/users/me", headers=headers, json={"password": "newsecret"})
    assert response.status_code == 400

    response = client.patch("/users/me", headers=headers, json={
        "password": "newsecret", "current_password": "wrong-one",
    })
    assert response.status_code == 401

    response = client.patch("/users/me", headers=headers, json={
        "password": "newsecret", "current_password": "secret123",
    })
    assert response.status_code == 200

    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "newsecret"})
    assert response.status_code == 200


def test_delete_my_account(client, register):
    headers, _ = register("ann")
    assert client.delete("/users/me", headers=headers).status_code == 204
    assert client.get("/users/me", headers=headers).status_code == 401


def test_admin_routes_need_role(client, register):
    headers, _ = register("ann")
    response = client.get("/users", headers=headers)
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_moderator_can_read_but_not_write(client, register, set_role):
    headers, body = register("mod")
    set_role(body["user"]["id"], role="MODERATOR")
    _, reader = register("reader")

    assert client.get("/users", headers=headers).status_code == 200
    assert client.get(f"/users/{reader['user']['id']}", headers=headers).status_code == 200
    response = client.delete(f"/users/{reader['user']['id']}", headers=headers)
    assert response.status_code == 403


def test_admin_manages_users(client, register, set_role):
    headers, body = register("boss")
    set_role(body["user"]["id"], role="ADMIN")

    response = client.post("/users", headers=headers, json={
        "username": "newbie",
        "email": "newbie@example.com",
        "password": "secret123",
        "role": "MODERATOR",
    })
    assert response.status_code == 201
    newbie = response.json()
    assert newbie["role"] == "MODERATOR"

    users = client.get("/users", headers=headers).json()
    assert {u["username"] for u in users} == {"boss", "newbie"}

    response = client.patch(f"/users/{newbie['id']}", headers=headers, json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    assert client.delete(f"/users/{newbie['id']}", headers=headers).status_code == 204
    response = client.get(f"/users/{newbie['id']}", headers=headers)
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
