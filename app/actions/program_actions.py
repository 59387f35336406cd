"""
Server actions for health programs
"""

from typing import Optional, Union
from sqlalchemy.orm import Session

from app.actions.common import parse_form
from app.auth.permissions import authorize
from app.schemas.common import ActionResult
from app.schemas.program import ProgramCreate, ProgramResponse, ProgramUpdate
from app.schemas.user import SessionUser
from app.services.program_service import ProgramService
from app.utils.error_handler import action_boundary

@action_boundary("fetch programs")
async def get_programs(session: Optional[SessionUser], db: Session, active_only: bool = False) -> ActionResult:
    authorize(session, "program:read")

    programs = await ProgramService(db).list_programs(active_only=active_only)
    return ActionResult.ok([ProgramResponse.model_validate(p) for p in programs])

@action_boundary("fetch program")
async def get_program(session: Optional[SessionUser], db: Session, program_id: int) -> ActionResult:
    authorize(session, "program:read")

    program = await ProgramService(db).get_program_or_404(program_id)
    return ActionResult.ok(ProgramResponse.model_validate(program))

@action_boundary("create program")
async def create_program(
    session: Optional[SessionUser],
    db: Session,
    form: Union[dict, ProgramCreate]
) -> ActionResult:
    authorize(session, "program:create")
    data = parse_form(ProgramCreate, form)

    program = await ProgramService(db).create_program(data)
    return ActionResult.ok(ProgramResponse.model_validate(program), message="Program created successfully")

@action_boundary("update program")
async def update_program(
    session: Optional[SessionUser],
    db: Session,
    program_id: int,
    form: Union[dict, ProgramUpdate]
) -> ActionResult:
    authorize(session, "program:update")
    data = parse_form(ProgramUpdate, form)

    service = ProgramService(db)
    program = await service.get_program_or_404(program_id)
    program = await service.update_program(program, data)
    return ActionResult.ok(ProgramResponse.model_validate(program), message="Program updated successfully")

@action_boundary("delete program")
async def delete_program(session: Optional[SessionUser], db: Session, program_id: int) -> ActionResult:
    authorize(session, "program:delete")

    await ProgramService(db).delete_program(program_id)
    return ActionResult.ok(message="Program deleted successfully")
