"""
HTTP surface for the server actions.

Every route answers with the ActionResult envelope; the status code follows
the result's error code.
"""

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session
from typing import Optional

from app.actions import client_actions, dashboard_actions, enrollment_actions, program_actions
from app.actions.common import action_response
from app.auth.auth_handler import get_optional_session
from app.database import get_db
from app.schemas.user import SessionUser
from app.utils.rate_limit import limiter

router = APIRouter()

# Clients
@router.get("/clients")
@limiter.limit("60/minute")
async def get_clients(
    request: Request,
    page: int = 1,
    page_size: int = 10,
    search: Optional[str] = None,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await client_actions.get_clients(session, db, page, page_size, search))

@router.get("/clients/{client_id}")
@limiter.limit("60/minute")
async def get_client(
    request: Request,
    client_id: int,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await client_actions.get_client(session, db, client_id))

@router.post("/clients")
@limiter.limit("30/minute")
async def create_client(
    request: Request,
    form: dict = Body(...),
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await client_actions.create_client(session, db, form))

@router.patch("/clients/{client_id}")
@limiter.limit("30/minute")
async def update_client(
    request: Request,
    client_id: int,
    form: dict = Body(...),
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await client_actions.update_client(session, db, client_id, form))

@router.delete("/clients/{client_id}")
@limiter.limit("30/minute")
async def delete_client(
    request: Request,
    client_id: int,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await client_actions.delete_client(session, db, client_id))

# Programs
@router.get("/programs")
@limiter.limit("60/minute")
async def get_programs(
    request: Request,
    active_only: bool = False,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await program_actions.get_programs(session, db, active_only))

@router.get("/programs/{program_id}")
@limiter.limit("60/minute")
async def get_program(
    request: Request,
    program_id: int,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await program_actions.get_program(session, db, program_id))

@router.post("/programs")
@limiter.limit("30/minute")
async def create_program(
    request: Request,
    form: dict = Body(...),
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await program_actions.create_program(session, db, form))

@router.patch("/programs/{program_id}")
@limiter.limit("30/minute")
async def update_program(
    request: Request,
    program_id: int,
    form: dict = Body(...),
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await program_actions.update_program(session, db, program_id, form))

@router.delete("/programs/{program_id}")
@limiter.limit("30/minute")
async def delete_program(
    request: Request,
    program_id: int,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await program_actions.delete_program(session, db, program_id))

# Enrollments
@router.get("/enrollments")
@limiter.limit("60/minute")
async def get_enrollments(
    request: Request,
    client_id: Optional[int] = None,
    program_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 10,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(
        await enrollment_actions.get_enrollments(session, db, client_id, program_id, page, page_size)
    )

@router.post("/enrollments")
@limiter.limit("30/minute")
async def create_enrollment(
    request: Request,
    form: dict = Body(...),
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await enrollment_actions.create_enrollment(session, db, form))

# Dashboard
@router.get("/dashboard/stats")
@limiter.limit("60/minute")
async def get_dashboard_stats(
    request: Request,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await dashboard_actions.get_dashboard_stats(session, db))

@router.get("/dashboard/registrations")
@limiter.limit("60/minute")
async def get_monthly_registrations(
    request: Request,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await dashboard_actions.get_monthly_registrations(session, db))

@router.get("/dashboard/distribution")
@limiter.limit("60/minute")
async def get_program_distribution(
    request: Request,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await dashboard_actions.get_program_distribution(session, db))

@router.get("/dashboard/recent-clients")
@limiter.limit("60/minute")
async def get_recent_clients(
    request: Request,
    limit: int = 5,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    return action_response(await dashboard_actions.get_recent_clients(session, db, limit))
