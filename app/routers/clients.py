"""
Read-only client endpoints for signed-in users and API-key holders
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging
import math

from app.auth.api_access import ApiCaller, get_api_caller
from app.database import get_db
from app.schemas.client import (
    ClientDetail, ClientDetailResponse, ClientListResponse, ClientSummary, Pagination
)
from app.schemas.enrollment import EnrollmentResponse
from app.services.activity_logger import ActivityLogger
from app.services.client_service import ClientService
from app.services.enrollment_service import EnrollmentService
from app.utils.error_handler import NotFoundError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=ClientListResponse)
@limiter.limit("60/minute")
async def list_clients(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize", description="Items per page"),
    search: Optional[str] = Query(None, description="Name, phone, national id or email"),
    caller: ApiCaller = Depends(get_api_caller),
    db: Session = Depends(get_db)
):
    """Paginated client list, or search results when `search` is given"""
    service = ClientService(db)
    if search and search.strip():
        result = await service.search_clients(search, page, page_size)
        clients, total = result.records, result.total_matches
    else:
        clients, total = await service.list_clients(page, page_size)

    total_pages = math.ceil(total / page_size) if total else 0

    await ActivityLogger(db).log_request(request, 200, actor=caller.actor)
    return ClientListResponse(
        clients=[ClientSummary.model_validate(c) for c in clients],
        pagination=Pagination(
            page=page,
            page_size=page_size,
            has_next_page=page < total_pages,
            total_records=total,
            total_pages=total_pages,
        ),
    )

@router.get("/{client_id}", response_model=ClientDetailResponse)
@limiter.limit("60/minute")
async def get_client(
    request: Request,
    client_id: int,
    caller: ApiCaller = Depends(get_api_caller),
    db: Session = Depends(get_db)
):
    """A client and its enrollments"""
    client = await ClientService(db).get_client(client_id)
    if not client:
        await ActivityLogger(db).log_request(request, 404, actor=caller.actor, error_message="Client not found")
        raise NotFoundError("Client not found")

    enrollments = await EnrollmentService(db).get_client_enrollments(client.id)

    await ActivityLogger(db).log_request(request, 200, actor=caller.actor)
    return ClientDetailResponse(
        client=ClientDetail.from_client(client),
        enrollments=[EnrollmentResponse.from_enrollment(e) for e in enrollments],
    )
