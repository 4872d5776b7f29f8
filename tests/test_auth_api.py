from app.core.config import settings
from app.core.security import decode_token
from app.models import RevokedToken, User

PASSWORD = "secret123"


def _register(client, **overrides):
    payload = {
        "name": "Siti",
        "email": "siti@example.com",
        "password": PASSWORD,
        "password_confirmation": PASSWORD,
    }
    payload.update(overrides)
    return client.post("/api/register", json=payload)


class TestRegister:
    def test_creates_user_and_returns_token(self, client, session):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "siti@example.com"
        assert "password_hash" not in body["data"]["user"]

        claims = decode_token(body["data"]["token"])
        assert claims["sub"] == str(body["data"]["user"]["id"])
        assert session.query(User).count() == 1

    def test_email_is_normalized(self, client):
        response = _register(client, email="  Siti@Example.COM ")

        assert response.json()["data"]["user"]["email"] == "siti@example.com"

    def test_duplicate_email(self, client, user):
        response = _register(client, email=user.email.upper())

        assert response.status_code == 422
        assert response.json()["errors"] == {"email": ["The email has already been taken."]}

    def test_password_confirmation_must_match(self, client):
        response = _register(client, password_confirmation="different")

        assert response.status_code == 422
        assert response.json()["errors"]["password"] == ["password confirmation does not match"]

    def test_short_password(self, client):
        response = _register(client, password="abc", password_confirmation="abc")

        assert response.status_code == 422
        assert "password" in response.json()["errors"]


class TestLogin:
    def test_returns_token_with_default_lifetime(self, client, user):
        response = client.post("/api/login", json={"email": user.email, "password": PASSWORD})

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["roles"] == ["user"]
        assert body["user"]["is_admin"] is False
        assert body["authorization"]["type"] == "Bearer"
        assert body["authorization"]["remember_me"] is False
        assert body["authorization"]["expires_in"] == settings.access_token_expire_minutes * 60

    def test_remember_me_extends_lifetime(self, client, user):
        response = client.post(
            "/api/login",
            json={"email": user.email, "password": PASSWORD, "remember_me": True},
        )

        authorization = response.json()["authorization"]
        assert authorization["remember_me"] is True
        assert authorization["expires_in"] == settings.remember_me_expire_minutes * 60

    def test_remember_me_must_be_boolean(self, client, user):
        response = client.post(
            "/api/login",
            json={"email": user.email, "password": PASSWORD, "remember_me": "yes"},
        )

        assert response.status_code == 422
        assert "remember_me" in response.json()["errors"]

    def test_wrong_password(self, client, user):
        response = client.post("/api/login", json={"email": user.email, "password": "nope-nope"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid email or password"}

    def test_unknown_email(self, client):
        response = client.post("/api/login", json={"email": "ghost@example.com", "password": PASSWORD})

        assert response.status_code == 401


class TestSession:
    def test_me_returns_profile(self, client, user, headers):
        response = client.get("/api/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == user.id

    def test_missing_token(self, client):
        response = client.get("/api/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Authorization token not found"

    def test_garbage_token(self, client):
        response = client.get("/api/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_logout_revokes_token(self, client, session, headers):
        response = client.post("/api/logout", headers=headers)

        assert response.status_code == 200
        assert session.query(RevokedToken).count() == 1

        again = client.get("/api/me", headers=headers)
        assert again.status_code == 401
        assert again.json()["message"] == "Token has been revoked"
