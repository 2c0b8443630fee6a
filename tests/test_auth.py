"""
Tests for registration, login, bearer tokens and password reset.
"""
from datetime import datetime, timedelta

from models import db
from models.password_reset_token import PasswordResetToken
from routes.auth import RESET_LINK_SENT
from security.session import hash_token


class TestRegister:
    """POST /register"""

    def test_register_player_returns_token(self, client):
        """A valid registration creates a player and logs them in."""
        resp = client.post("/register", json={
            "name": "Ana",
            "email": "Ana@Example.com",
            "password": "secret123",
            "password_confirmation": "secret123",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["user"]["email"] == "ana@example.com"
        assert body["user"]["role"] == "player"
        assert body["token"]

        me = client.get("/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.get_json()["name"] == "Ana"

    def test_register_owner_allowed(self, client):
        resp = client.post("/register", json={
            "name": "Olive", "email": "olive@example.com", "password": "secret123", "role": "owner",
        })
        assert resp.status_code == 201
        assert resp.get_json()["user"]["role"] == "owner"

    def test_register_rejects_privileged_role(self, client):
        """queue_master and superadmin cannot be self-assigned."""
        resp = client.post("/register", json={
            "name": "Q", "email": "q@example.com", "password": "secret123", "role": "superadmin",
        })
        assert resp.status_code == 422
        body = resp.get_json()
        assert body["error"] == "validation_failed"
        assert "role" in body["errors"]

    def test_register_duplicate_email(self, client, make_user):
        make_user(email="taken@example.com")
        resp = client.post("/register", json={
            "name": "Dup", "email": "taken@example.com", "password": "secret123",
        })
        assert resp.status_code == 422
        assert "email" in resp.get_json()["errors"]

    def test_register_weak_password(self, client):
        """Passwords need 8+ characters with letters and numbers."""
        resp = client.post("/register", json={
            "name": "Weak", "email": "weak@example.com", "password": "abcdefgh",
        })
        assert resp.status_code == 422
        assert "password" in resp.get_json()["errors"]

    def test_register_confirmation_mismatch(self, client):
        resp = client.post("/register", json={
            "name": "Mis", "email": "mis@example.com",
            "password": "secret123", "password_confirmation": "secret124",
        })
        assert resp.status_code == 422
        assert "password" in resp.get_json()["errors"]


class TestLogin:
    """POST /login, GET /me, POST /logout"""

    def test_login_success(self, client, make_user):
        make_user(email="p@example.com", password="secret123")
        resp = client.post("/login", json={"email": "P@example.com", "password": "secret123"})
        assert resp.status_code == 200
        assert resp.get_json()["token"]

    def test_login_bad_password(self, client, make_user):
        make_user(email="p@example.com", password="secret123")
        resp = client.post("/login", json={"email": "p@example.com", "password": "wrong1234"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "invalid_credentials"

    def test_login_unknown_email(self, client):
        resp = client.post("/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert resp.status_code == 401

    def test_login_missing_fields(self, client):
        resp = client.post("/login", json={})
        assert resp.status_code == 422
        errors = resp.get_json()["errors"]
        assert "email" in errors and "password" in errors

    def test_me_requires_token(self, client):
        resp = client.get("/me")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "unauthenticated"

    def test_garbage_token_rejected(self, client):
        resp = client.get("/me", headers={"Authorization": "Bearer not-a-real-token"})
        assert resp.status_code == 401

    def test_user_alias(self, client, player, auth_headers):
        resp = client.get("/user", headers=auth_headers(player))
        assert resp.status_code == 200
        assert resp.get_json()["id"] == player.id

    def test_logout_revokes_token(self, client, player, auth_headers):
        headers = auth_headers(player)
        assert client.post("/logout", headers=headers).status_code == 200
        assert client.get("/me", headers=headers).status_code == 401

    def test_expired_token_rejected(self, client, app, player, auth_headers):
        headers = auth_headers(player)
        app.config["TOKEN_IDLE_TIMEOUT_SECONDS"] = 1

        from models.auth_token import AuthToken
        row = AuthToken.query.filter_by(user_id=player.id).first()
        row.last_used_at = datetime.utcnow() - timedelta(seconds=10)
        db.session.commit()

        assert client.get("/me", headers=headers).status_code == 401


class TestPasswordReset:
    """POST /forgot-password, POST /reset-password"""

    def test_forgot_password_same_answer_for_unknown_email(self, client, make_user):
        make_user(email="known@example.com")
        known = client.post("/forgot-password", json={"email": "known@example.com"})
        unknown = client.post("/forgot-password", json={"email": "nobody@example.com"})
        assert known.status_code == unknown.status_code == 200
        assert known.get_json()["message"] == unknown.get_json()["message"] == RESET_LINK_SENT

    def test_forgot_password_stores_token(self, client, make_user):
        make_user(email="known@example.com")
        client.post("/forgot-password", json={"email": "known@example.com"})
        assert PasswordResetToken.query.filter_by(email="known@example.com").count() == 1

    def _reset_token(self, email, raw="raw-reset-token", expires_in=3600):
        db.session.add(PasswordResetToken(
            email=email,
            token_hash=hash_token(raw),
            expires_at=datetime.utcnow() + timedelta(seconds=expires_in),
        ))
        db.session.commit()
        return raw

    def test_reset_password_changes_password(self, client, make_user, auth_headers):
        user = make_user(email="r@example.com", password="secret123")
        old_headers = auth_headers(user)
        raw = self._reset_token("r@example.com")

        resp = client.post("/reset-password", json={
            "token": raw, "email": "r@example.com",
            "password": "newpass456", "password_confirmation": "newpass456",
        })
        assert resp.status_code == 200

        # existing tokens are revoked
        assert client.get("/me", headers=old_headers).status_code == 401
        assert client.post("/login", json={"email": "r@example.com", "password": "newpass456"}).status_code == 200
        assert client.post("/login", json={"email": "r@example.com", "password": "secret123"}).status_code == 401

    def test_reset_token_single_use(self, client, make_user):
        make_user(email="r@example.com")
        raw = self._reset_token("r@example.com")
        payload = {
            "token": raw, "email": "r@example.com",
            "password": "newpass456", "password_confirmation": "newpass456",
        }
        assert client.post("/reset-password", json=payload).status_code == 200
        resp = client.post("/reset-password", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "invalid_reset_token"

    def test_reset_expired_token(self, client, make_user):
        make_user(email="r@example.com")
        raw = self._reset_token("r@example.com", expires_in=-60)
        resp = client.post("/reset-password", json={
            "token": raw, "email": "r@example.com",
            "password": "newpass456", "password_confirmation": "newpass456",
        })
        assert resp.status_code == 400
