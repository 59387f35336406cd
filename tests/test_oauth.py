"""
Google sign-in
"""

import asyncio
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.auth.oauth import GoogleOAuthClient, OAuthProfile, get_oauth_client
from app.models import User
from app.utils.error_handler import UnauthorizedError
from main import app

class FakeOAuthClient:
    """Stands in for Google; hands back a fixed profile"""
    provider = "google"

    def __init__(self, profile: OAuthProfile):
        self.profile = profile
        self.codes = []

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.example.com/auth?state={state}"

    async def authenticate(self, code: str) -> OAuthProfile:
        self.codes.append(code)
        return self.profile

@pytest.fixture
def fake_google(client):
    fake = FakeOAuthClient(OAuthProfile(
        provider="google", subject="google-123", email="wanjiku@example.com", name="Wanjiku Kariuki"
    ))
    app.dependency_overrides[get_oauth_client] = lambda: fake
    return fake

def sign_in(client, code="auth-code", state="state-123"):
    client.cookies.set("oauth-state", state)
    return client.get(f"/api/auth/google/callback?code={code}&state={state}", follow_redirects=False)

class TestGoogleLogin:

    def test_login_redirects_to_google(self, client, db_session):
        response = client.get("/api/auth/google/login", follow_redirects=False)

        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        params = parse_qs(location.query)
        assert location.netloc == "accounts.google.com"
        assert params["prompt"] == ["consent"]
        assert params["access_type"] == ["offline"]
        assert params["response_type"] == ["code"]
        assert params["state"][0] == response.cookies["oauth-state"]

class TestGoogleCallback:

    def test_first_sign_in_creates_doctor(self, client, db_session, fake_google):
        response = sign_in(client)

        assert response.status_code == 302
        assert "session-token" in response.cookies
        user = db_session.query(User).one()
        assert user.role == "Doctor"
        assert user.oauth_provider == "google"
        assert user.oauth_id == "google-123"
        assert user.hashed_password is None

        me = client.get("/api/auth/me")
        assert me.json()["email"] == "wanjiku@example.com"

    def test_second_sign_in_reuses_user(self, client, db_session, fake_google):
        sign_in(client)
        sign_in(client, code="second-code")

        assert db_session.query(User).count() == 1
        assert fake_google.codes == ["auth-code", "second-code"]

    def test_links_existing_account(self, client, db_session, fake_google, make_user):
        existing = make_user("Nurse", email="wanjiku@example.com")

        sign_in(client)

        db_session.refresh(existing)
        assert db_session.query(User).count() == 1
        assert existing.role == "Nurse"
        assert existing.oauth_provider == "google"

    def test_state_mismatch(self, client, db_session, fake_google):
        client.cookies.set("oauth-state", "expected")
        response = client.get("/api/auth/google/callback?code=abc&state=forged", follow_redirects=False)

        assert response.status_code == 401
        assert db_session.query(User).count() == 0

    def test_provider_error(self, client, db_session, fake_google):
        response = client.get("/api/auth/google/callback?error=access_denied", follow_redirects=False)
        assert response.status_code == 401

class TestGoogleOAuthClient:
    """The HTTP exchange against a mocked transport"""

    def make_client(self, handler):
        return GoogleOAuthClient(
            client_id="id", client_secret="secret", redirect_uri="http://testserver/callback",
            transport=httpx.MockTransport(handler),
        )

    def test_authenticate(self):
        def handler(request):
            if request.url.path == "/token":
                return httpx.Response(200, json={"access_token": "token-1"})
            assert request.headers["Authorization"] == "Bearer token-1"
            return httpx.Response(200, json={"sub": "42", "email": "Doc@Example.com", "name": "Doc"})

        profile = asyncio.run(self.make_client(handler).authenticate("code"))

        assert profile == OAuthProfile(provider="google", subject="42", email="doc@example.com", name="Doc")

    def test_rejected_code(self):
        def handler(request):
            return httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(UnauthorizedError):
            asyncio.run(self.make_client(handler).authenticate("bad-code"))

    def test_profile_without_email(self):
        def handler(request):
            if request.url.path == "/token":
                return httpx.Response(200, json={"access_token": "token-1"})
            return httpx.Response(200, json={"sub": "42"})

        with pytest.raises(UnauthorizedError):
            asyncio.run(self.make_client(handler).authenticate("code"))
