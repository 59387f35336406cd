"""
API keys for machine access to the read-only REST endpoints
"""

from sqlalchemy import update
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
from typing import Optional
import hmac
import logging
import secrets

from app.config import settings
from app.models.api_key import ApiKey
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

KEY_PREFIX = "his_"

class ApiKeyService:
    """Generate, validate, revoke and list API keys"""

    def __init__(self, db: Session, master_key: Optional[str] = None):
        self.db = db
        self.master_key = master_key if master_key is not None else settings.API_MASTER_KEY

    async def generate(self, owner: str, expires_in_days: Optional[int] = None) -> str:
        key = f"{KEY_PREFIX}{secrets.token_hex(24)}"
        expires_at = None
        if expires_in_days:
            expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)

        try:
            self.db.add(ApiKey(key=key, owner=owner, expires_at=expires_at, is_revoked=False))
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create API key for {owner}: {e}")
            raise DatabaseError(f"Failed to create API key: {str(e)}", e)

        logger.info(f"Generated API key for {owner}")
        return key

    async def validate(self, key: Optional[str]) -> bool:
        """True for the master key or a live key; stamps last_used on the latter"""
        if not key:
            return False
        if self.master_key and hmac.compare_digest(key.encode(), self.master_key.encode()):
            return True

        now = datetime.now(timezone.utc)
        try:
            # Check and stamp in one statement so a concurrent revoke cannot slip between
            result = self.db.execute(
                update(ApiKey)
                .where(
                    ApiKey.key == key,
                    ApiKey.is_revoked.is_(False),
                    (ApiKey.expires_at.is_(None)) | (ApiKey.expires_at > now),
                )
                .values(last_used=now)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"API key validation failed: {e}")
            return False

        if result.rowcount > 0:
            return True
        logger.warning("Rejected unknown, revoked or expired API key")
        return False

    async def owner_of(self, key: str) -> Optional[str]:
        if self.master_key and hmac.compare_digest(key.encode(), self.master_key.encode()):
            return "master"
        record = self.db.query(ApiKey).filter(ApiKey.key == key).first()
        return record.owner if record else None

    async def revoke(self, key: str) -> bool:
        """Soft delete; False when there is no live key with that value"""
        try:
            result = self.db.execute(
                update(ApiKey)
                .where(ApiKey.key == key, ApiKey.is_revoked.is_(False))
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to revoke API key: {e}")
            raise DatabaseError(f"Failed to revoke API key: {str(e)}", e)

        revoked = result.rowcount > 0
        if revoked:
            logger.info("Revoked API key")
        return revoked

    async def list_keys(self) -> list[ApiKey]:
        return (
            self.db.query(ApiKey)
            .filter(ApiKey.is_revoked.is_(False))
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
            .all()
        )
