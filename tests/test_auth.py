"""
Tests for authentication endpoints.
Uses in-memory SQLite database for fast, isolated tests.
"""
from fastapi import status

from security import jwt as jwt_utils
from security.password import hash_password, verify_password

REGISTRATION = {
    "first_name": "Amina",
    "last_name": "Benali",
    "email": "amina@example.com",
    "phone": "0555123456",
    "password": "SecurePass123!",
}


class TestRegister:
    """Test user registration."""

    def test_register_success(self, client):
        response = client.post("/auth/register", json=REGISTRATION)
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["email"] == "amina@example.com"
        assert data["phone"] == "0555123456"
        assert data["is_superadmin"] is False
        assert "password_hash" not in data

    def test_register_duplicate_email(self, client):
        client.post("/auth/register", json=REGISTRATION)
        response = client.post("/auth/register", json={**REGISTRATION, "email": "AMINA@EXAMPLE.COM"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "already registered" in response.json()["detail"]

    def test_register_short_password(self, client):
        response = client.post("/auth/register", json={**REGISTRATION, "password": "short"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestLogin:
    """Test user login."""

    def test_login_success(self, client, customer):
        response = client.post("/auth/login", json={"email": customer.email, "password": "testpass123"})
        assert response.status_code == status.HTTP_200_OK
        tokens = response.json()
        assert tokens["token_type"] == "bearer"
        assert jwt_utils.decode_access(tokens["access_token"])["sub"] == str(customer.id)

    def test_login_invalid_password(self, client, customer):
        response = client.post("/auth/login", json={"email": customer.email, "password": "wrongpassword"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "Invalid credentials" in response.json()["detail"]

    def test_login_nonexistent_user(self, client):
        response = client.post("/auth/login", json={"email": "nobody@example.com", "password": "testpass123"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestTokens:

    def test_me(self, client, customer, auth_headers):
        response = client.get("/auth/me", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == customer.id

    def test_me_invalid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer invalid.token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_token_is_not_an_access_token(self, client, customer):
        refresh = jwt_utils.create_refresh_token(str(customer.id))
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {refresh}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh(self, client, customer):
        refresh = jwt_utils.create_refresh_token(str(customer.id))
        response = client.post("/auth/refresh", json={"refresh_token": refresh})
        assert response.status_code == status.HTTP_200_OK
        assert jwt_utils.decode_access(response.json()["access_token"])["sub"] == str(customer.id)

    def test_refresh_token_invalid(self, client):
        response = client.post("/auth/refresh", json={"refresh_token": "not.a.valid.jwt"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_access_token_cannot_refresh(self, client, customer):
        access = jwt_utils.create_access_token(str(customer.id))
        response = client.post("/auth/refresh", json={"refresh_token": access})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = hash_password("testpass123")
        assert hashed != "testpass123"
        assert verify_password("testpass123", hashed)
        assert not verify_password("wrong", hashed)

    def test_long_password_is_clipped_consistently(self):
        password = "é" * 100
        assert verify_password(password, hash_password(password))
