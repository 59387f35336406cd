"""
Read-only program endpoints for signed-in users and API-key holders
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging

from app.auth.api_access import ApiCaller, get_api_caller
from app.database import get_db
from app.schemas.program import ProgramListResponse, ProgramResponse
from app.services.activity_logger import ActivityLogger
from app.services.program_service import ProgramService
from app.utils.error_handler import NotFoundError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=ProgramListResponse)
@limiter.limit("60/minute")
async def list_programs(
    request: Request,
    caller: ApiCaller = Depends(get_api_caller),
    db: Session = Depends(get_db)
):
    """Active programs"""
    programs = await ProgramService(db).list_programs(active_only=True)

    await ActivityLogger(db).log_request(request, 200, actor=caller.actor)
    return ProgramListResponse(programs=[ProgramResponse.model_validate(p) for p in programs])

@router.get("/{program_id}", response_model=ProgramResponse)
@limiter.limit("60/minute")
async def get_program(
    request: Request,
    program_id: int,
    caller: ApiCaller = Depends(get_api_caller),
    db: Session = Depends(get_db)
):
    program = await ProgramService(db).get_program(program_id)
    if not program:
        await ActivityLogger(db).log_request(request, 404, actor=caller.actor, error_message="Program not found")
        raise NotFoundError("Program not found")

    await ActivityLogger(db).log_request(request, 200, actor=caller.actor)
    return ProgramResponse.model_validate(program)
