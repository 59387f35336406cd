"""
Access rule for the read-only REST endpoints: a signed-in user or an API key
"""

from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from app.auth.auth_handler import get_optional_session
from app.auth.permissions import authorize
from app.database import get_db
from app.schemas.user import SessionUser
from app.services.activity_logger import ActivityLogger
from app.services.api_key_service import ApiKeyService
from app.utils.error_handler import UnauthorizedError

logger = logging.getLogger(__name__)

@dataclass
class ApiCaller:
    """Who is calling a REST endpoint"""
    actor: str
    via_api_key: bool
    session: Optional[SessionUser] = None

async def get_api_caller(
    request: Request,
    x_api_key: Optional[str] = Header(None),
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
) -> ApiCaller:
    """A presented key must be valid even when a session is also present"""
    if x_api_key is not None:
        service = ApiKeyService(db)
        if not await service.validate(x_api_key):
            await ActivityLogger(db).log_request(request, 401, error_message="Invalid API key")
            raise UnauthorizedError("Invalid API key")
        owner = await service.owner_of(x_api_key)
        return ApiCaller(actor=f"api-key:{owner}", via_api_key=True)

    if session is None:
        raise UnauthorizedError("API key or authentication required")
    authorize(session, "client:read")
    return ApiCaller(actor=session.email, via_api_key=False, session=session)
