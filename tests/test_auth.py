"""
Unit tests for authentication functionality
"""

from app.models import Facility, User
from app.config import Settings

import pytest

def registration(**overrides):
    data = {
        "name": "Jane Mwangi",
        "email": "jane@example.com",
        "password": "password123",
        "confirm_password": "password123",
        "role": "Doctor",
        "facility_name": "Central Clinic",
        "facility_phone": "(020) 555-0101",
        "license_number": "LIC-0001",
        "specialization": "Pediatrics",
    }
    data.update(overrides)
    return data

class TestUserRegistration:
    """Test cases for staff registration"""

    def test_register_success(self, client, db_session):
        """Test successful registration"""
        response = client.post("/api/auth/register", json=registration())
        assert response.status_code == 201

        body = response.json()
        assert body["success"] is True
        assert body["data"]["email"] == "jane@example.com"
        assert body["data"]["role"] == "Doctor"
        assert "hashed_password" not in body["data"]

        facility = db_session.query(Facility).one()
        assert facility.name == "Central Clinic"
        assert facility.phone == "0205550101"

    def test_register_duplicate_email(self, client, db_session):
        """Existing user is left untouched"""
        assert client.post("/api/auth/register", json=registration()).status_code == 201

        response = client.post("/api/auth/register", json=registration(name="Someone Else", role="Nurse"))
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"
        assert response.json()["error"] == "User with this email already exists"

        user = db_session.query(User).filter(User.email == "jane@example.com").one()
        assert user.name == "Jane Mwangi"
        assert user.role == "Doctor"

    def test_register_reuses_facility_by_name(self, client, db_session):
        client.post("/api/auth/register", json=registration())
        client.post("/api/auth/register", json=registration(email="john@example.com", role="Nurse"))

        assert db_session.query(Facility).count() == 1
        assert db_session.query(User).count() == 2

    def test_register_password_mismatch(self, client):
        response = client.post("/api/auth/register", json=registration(confirm_password="different1"))
        assert response.status_code == 422

        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["confirm_password"] == ["Passwords do not match"]

    def test_register_short_password(self, client):
        response = client.post(
            "/api/auth/register", json=registration(password="short", confirm_password="short")
        )
        assert response.status_code == 422
        assert "Password must be at least 8 characters" in response.json()["details"]["password"]

    def test_register_admin_role_rejected(self, client, db_session):
        """Admins cannot self-register"""
        response = client.post("/api/auth/register", json=registration(role="Admin"))
        assert response.status_code == 422
        assert "role" in response.json()["details"]
        assert db_session.query(User).count() == 0

    def test_register_missing_license(self, client):
        response = client.post("/api/auth/register", json=registration(license_number=" "))
        assert response.status_code == 422
        assert response.json()["details"]["license_number"] == ["License number is required"]

class TestUserLogin:
    """Test cases for email/password login"""

    def test_login_success_sets_cookie(self, client, make_user):
        make_user("Nurse", email="nurse@example.com")

        response = client.post("/api/auth/login", json={"email": "Nurse@Example.com", "password": "password123"})
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "Nurse"
        assert "session-token" in response.cookies

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == "nurse@example.com"

    def test_login_wrong_password(self, client, make_user):
        make_user("Doctor", email="doc@example.com")

        response = client.post("/api/auth/login", json={"email": "doc@example.com", "password": "wrongpass"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"
        assert "session-token" not in response.cookies

    def test_login_unknown_email(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "password123"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"

    def test_login_oauth_only_account(self, client, make_user):
        """Accounts without a password cannot log in with one"""
        make_user("Doctor", email="oauth@example.com", password=None)

        response = client.post("/api/auth/login", json={"email": "oauth@example.com", "password": "password123"})
        assert response.status_code == 401

    def test_login_validation(self, client):
        response = client.post("/api/auth/login", json={"email": "not-an-email", "password": ""})
        assert response.status_code == 422
        details = response.json()["details"]
        assert "email" in details
        assert details["password"] == ["Password is required"]

class TestSession:
    """Test cases for session resolution and logout"""

    def test_me_requires_session(self, client, db_session):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_me_with_bearer_token(self, client, doctor, auth_headers):
        response = client.get("/api/auth/me", headers=auth_headers(doctor))
        assert response.status_code == 200
        assert response.json()["role"] == "Doctor"

    def test_invalid_token_is_no_session(self, client, db_session):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_logout_clears_cookie(self, client, make_user):
        make_user("Doctor", email="doc@example.com")
        client.post("/api/auth/login", json={"email": "doc@example.com", "password": "password123"})
        assert client.get("/api/auth/me").status_code == 200

        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        assert client.get("/api/auth/me").status_code == 401

class TestAdminUserManagement:
    """Test cases for admin-only user endpoints"""

    def test_list_users_admin(self, client, admin, doctor, nurse, auth_headers):
        response = client.get("/api/auth/users", headers=auth_headers(admin))
        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["total_records"] == 3
        assert body["meta"]["page"] == 1
        assert body["meta"]["total_pages"] == 1
        assert "users" not in body
        assert {u["role"] for u in body["data"]} == {"Admin", "Doctor", "Nurse"}

    def test_list_users_role_filter(self, client, admin, doctor, nurse, auth_headers):
        response = client.get("/api/auth/users?role=Nurse", headers=auth_headers(admin))
        assert [u["email"] for u in response.json()["data"]] == ["nurse@example.com"]

    def test_list_users_forbidden_for_doctor(self, client, doctor, auth_headers):
        response = client.get("/api/auth/users", headers=auth_headers(doctor))
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_list_users_requires_session(self, client, db_session):
        assert client.get("/api/auth/users").status_code == 401

    def test_change_role(self, client, admin, nurse, auth_headers, db_session):
        response = client.patch(
            f"/api/auth/users/{nurse.id}/role", json={"role": "Doctor"}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "Doctor"
        assert db_session.get(User, nurse.id).role == "Doctor"

    def test_change_role_invalid(self, client, admin, nurse, auth_headers):
        response = client.patch(
            f"/api/auth/users/{nurse.id}/role", json={"role": "Janitor"}, headers=auth_headers(admin)
        )
        assert response.status_code == 422

    def test_change_role_unknown_user(self, client, admin, auth_headers):
        response = client.patch("/api/auth/users/999/role", json={"role": "Doctor"}, headers=auth_headers(admin))
        assert response.status_code == 404

class TestConfiguration:
    """Startup configuration checks"""

    def test_missing_oauth_credentials_fail(self):
        settings = Settings()
        settings.GOOGLE_CLIENT_SECRET = None
        with pytest.raises(RuntimeError, match="Missing Google OAuth credentials"):
            settings.require_oauth_credentials()

    def test_oauth_credentials_present(self):
        Settings().require_oauth_credentials()

class TestPublicEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Health Information System API"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"
