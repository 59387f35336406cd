"""
API key management (Admin only)
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging

from app.auth.permissions import api_key_admin_required
from app.database import get_db
from app.schemas.api_key import (
    ApiKeyCreate, ApiKeyCreatedResponse, ApiKeyInfo, ApiKeyListResponse, ApiKeyRevoke
)
from app.schemas.user import SessionUser
from app.services.activity_logger import ActivityLogger
from app.services.api_key_service import ApiKeyService
from app.utils.error_handler import BadRequestError, NotFoundError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=ApiKeyListResponse)
@limiter.limit("30/minute")
async def list_keys(
    request: Request,
    current_user: SessionUser = Depends(api_key_admin_required),
    db: Session = Depends(get_db)
):
    """Keys that have not been revoked"""
    keys = await ApiKeyService(db).list_keys()
    return ApiKeyListResponse(keys=[ApiKeyInfo.model_validate(k) for k in keys])

@router.post("", response_model=ApiKeyCreatedResponse)
@limiter.limit("10/minute")
async def create_key(
    request: Request,
    body: ApiKeyCreate,
    current_user: SessionUser = Depends(api_key_admin_required),
    db: Session = Depends(get_db)
):
    if not body.owner or not body.owner.strip():
        raise BadRequestError("Owner name is required")

    key = await ApiKeyService(db).generate(body.owner.strip(), body.expires_in_days)

    await ActivityLogger(db).log_request(request, 200, actor=current_user.email)
    logger.info(f"Admin {current_user.email} issued an API key for {body.owner.strip()}")
    return ApiKeyCreatedResponse(message="API key generated successfully", api_key=key)

@router.delete("")
@limiter.limit("10/minute")
async def revoke_key(
    request: Request,
    body: ApiKeyRevoke,
    current_user: SessionUser = Depends(api_key_admin_required),
    db: Session = Depends(get_db)
):
    if not body.api_key:
        raise BadRequestError("API key is required")

    if not await ApiKeyService(db).revoke(body.api_key):
        raise NotFoundError("API key not found")

    await ActivityLogger(db).log_request(request, 200, actor=current_user.email)
    logger.info(f"Admin {current_user.email} revoked an API key")
    return {"message": "API key revoked successfully"}
