"""Registration, login and profile endpoints."""

from jose import jwt

from app.core.config import settings
from app.core.security import ALGORITHM

API = "/api/v1"


def register(client, email="new@example.com", password="secret123", **extra):
    body = {"email": email, "password": password, "full_name": "New Guest", **extra}
    return client.post(f"{API}/auth/register", json=body)


class TestRegister:
    def test_register_customer(self, client):
        response = register(client, phone="+44 1234")
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "customer"
        assert data["user"]["phone"] == "+44 1234"
        claims = jwt.decode(data["access_token"], settings.SECRET_KEY, algorithms=[ALGORITHM])
        assert claims["role"] == "customer"

    def test_role_cannot_be_chosen(self, client):
        response = register(client, role="admin")
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "customer"

    def test_duplicate_email(self, client, test_user):
        response = register(client, email="guest@example.com")
        assert response.status_code == 400

    def test_short_password(self, client):
        assert register(client, password="abc").status_code == 422

    def test_staff_register_needs_secret(self, client):
        body = {
            "email": "desk@example.com",
            "password": "secret123",
            "full_name": "Desk",
            "role": "staff",
            "admin_secret": "wrong",
        }
        assert client.post(f"{API}/auth/staff/register", json=body).status_code == 403

        body["admin_secret"] = "change-this-admin-secret"
        response = client.post(f"{API}/auth/staff/register", json=body)
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "staff"


class TestLogin:
    def test_login(self, client, test_user):
        response = client.post(
            f"{API}/auth/login", data={"username": "guest@example.com", "password": "testpass123"},
        )
        assert response.status_code == 200
        token = response.json()["access_token"]

        response = client.get(f"{API}/me/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["email"] == "guest@example.com"

    def test_wrong_password(self, client, test_user):
        response = client.post(
            f"{API}/auth/login", data={"username": "guest@example.com", "password": "nope"},
        )
        assert response.status_code == 401

    def test_inactive_account(self, client, db_session, test_user):
        test_user.is_active = False
        db_session.commit()
        response = client.post(
            f"{API}/auth/login", data={"username": "guest@example.com", "password": "testpass123"},
        )
        assert response.status_code == 403

    def test_bad_token(self, client):
        response = client.get(f"{API}/me/", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestProfile:
    def test_update_profile(self, client, auth_headers):
        response = client.patch(f"{API}/me/", json={"full_name": "Renamed"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["full_name"] == "Renamed"
        assert response.json()["email"] == "guest@example.com"

    def test_change_password(self, client, auth_headers):
        response = client.patch(
            f"{API}/me/password",
            json={"current_password": "wrong", "new_password": "newpass123"},
            headers=auth_headers,
        )
        assert response.status_code == 400

        response = client.patch(
            f"{API}/me/password",
            json={"current_password": "testpass123", "new_password": "newpass123"},
            headers=auth_headers,
        )
        assert response.status_code == 200

        response = client.post(
            f"{API}/auth/login", data={"username": "guest@example.com", "password": "newpass123"},
        )
        assert response.status_code == 200
