"""
Google OAuth (authorization-code flow) client
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode
import logging

import httpx

from app.config import settings
from app.utils.error_handler import UnauthorizedError

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

@dataclass
class OAuthProfile:
    """Identity returned by the provider"""
    provider: str
    subject: str
    email: str
    name: Optional[str] = None

class GoogleOAuthClient:
    """Thin wrapper over Google's OAuth endpoints"""

    provider = "google"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self.transport = transport

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "prompt": "consent",
            "access_type": "offline",
            "state": state,
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict:
        """Trade the authorization code for tokens"""
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(GOOGLE_TOKEN_URL, data=data)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.warning(f"OAuth code exchange failed: {e}")
            raise UnauthorizedError("OAuth sign-in failed")

    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"OAuth profile fetch failed: {e}")
            raise UnauthorizedError("OAuth sign-in failed")

        if not data.get("email"):
            raise UnauthorizedError("OAuth account has no email address")
        return OAuthProfile(
            provider=self.provider,
            subject=str(data.get("sub", "")),
            email=data["email"].lower(),
            name=data.get("name"),
        )

    async def authenticate(self, code: str) -> OAuthProfile:
        tokens = await self.exchange_code(code)
        access_token = tokens.get("access_token")
        if not access_token:
            raise UnauthorizedError("OAuth sign-in failed")
        return await self.fetch_profile(access_token)

def get_oauth_client() -> GoogleOAuthClient:
    """Dependency; overridden in tests"""
    return GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
    )
