"""
Authentication handler: password hashing, session tokens and the
FastAPI dependencies that resolve the current session
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from jose import JWTError, jwt
import logging

from app.config import settings
from app.schemas.user import SessionUser
from app.utils.error_handler import UnauthorizedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)
bearer_scheme = HTTPBearer(auto_error=False)

class AuthHandler:
    """Handles credential checks and session token issuance"""

    def __init__(self):
        self.pwd_context = pwd_context

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Verify a password against its hash; OAuth-only accounts never match"""
        if not hashed_password:
            return False
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.pwd_context.hash(password)

    def create_session_token(self, user: SessionUser, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed session token carrying {id, email, name, role}"""
        if expires_delta is None:
            expires_delta = timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS)
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "role": user.role.value,
            "exp": datetime.now(timezone.utc) + expires_delta,
        }
        return jwt.encode(to_encode, settings.SESSION_SECRET, algorithm=settings.SESSION_ALGORITHM)

    def verify_session_token(self, token: str) -> SessionUser:
        """Verify and decode a session token"""
        try:
            payload = jwt.decode(token, settings.SESSION_SECRET, algorithms=[settings.SESSION_ALGORITHM])
            return SessionUser(
                id=int(payload["sub"]),
                email=payload["email"],
                name=payload.get("name"),
                role=payload["role"],
            )
        except (JWTError, KeyError, ValueError):
            raise UnauthorizedError("Could not validate credentials")

    def set_session_cookie(self, response: Response, user: SessionUser) -> None:
        response.set_cookie(
            key=settings.SESSION_COOKIE_NAME,
            value=self.create_session_token(user),
            httponly=True,
            secure=settings.is_production,
            max_age=settings.SESSION_MAX_AGE_SECONDS,
            samesite="lax",
            path="/",
        )

    def clear_session_cookie(self, response: Response) -> None:
        response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")

auth_handler = AuthHandler()

def get_optional_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[SessionUser]:
    """Resolve the session from the cookie, falling back to a bearer token.

    Returns None when there is no usable session; callers decide whether that
    is an error.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials:
        token = credentials.credentials
    if not token:
        return None
    try:
        return auth_handler.verify_session_token(token)
    except UnauthorizedError:
        logger.warning(f"Rejected session token on {request.method} {request.url.path}")
        return None

def get_current_session(session: Optional[SessionUser] = Depends(get_optional_session)) -> SessionUser:
    """Dependency for routes that require a signed-in user"""
    if session is None:
        raise UnauthorizedError("Authentication required")
    return session
