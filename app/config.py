"""
Application settings loaded from the environment
"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Runtime configuration for the health information system"""

    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./health_info.db")

    # Session tokens
    SESSION_SECRET = os.getenv("SESSION_SECRET", "your-secret-key-change-in-production")
    SESSION_ALGORITHM = "HS256"
    SESSION_COOKIE_NAME = "session-token"
    SESSION_MAX_AGE_SECONDS = 30 * 24 * 60 * 60  # 30 days
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Machine access
    API_MASTER_KEY = os.getenv("API_KEY", "dev-master-api-key-for-testing")

    # Google OAuth
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
    GOOGLE_REDIRECT_URI = os.getenv(
        "GOOGLE_REDIRECT_URI", "http://localhost:8000/api/auth/google/callback"
    )
    POST_LOGIN_REDIRECT = os.getenv("POST_LOGIN_REDIRECT", "/")

    RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    CORS_ORIGINS: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def require_oauth_credentials(self):
        """Fail hard when the OAuth client is not configured"""
        if not self.GOOGLE_CLIENT_ID or not self.GOOGLE_CLIENT_SECRET:
            raise RuntimeError("Missing Google OAuth credentials")


settings = Settings()
