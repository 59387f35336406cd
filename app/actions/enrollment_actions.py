"""
Server actions for program enrollments
"""

from typing import Optional, Union
from sqlalchemy.orm import Session

from app.actions.common import normalize_paging, page_meta, parse_form
from app.auth.permissions import authorize
from app.schemas.common import ActionResult
from app.schemas.enrollment import EnrollmentCreate, EnrollmentResponse
from app.schemas.user import SessionUser
from app.services.enrollment_service import EnrollmentService
from app.utils.error_handler import BadRequestError, action_boundary

@action_boundary("fetch enrollments")
async def get_enrollments(
    session: Optional[SessionUser],
    db: Session,
    client_id: Optional[int] = None,
    program_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 10
) -> ActionResult:
    """Enrollments of a client or of a program"""
    authorize(session, "enrollment:read")
    if client_id is None and program_id is None:
        raise BadRequestError("A client or program id is required")
    page, page_size = normalize_paging(page, page_size)

    enrollments, total = await EnrollmentService(db).get_enrollments(client_id, program_id, page, page_size)
    return ActionResult.ok(
        [EnrollmentResponse.from_enrollment(e) for e in enrollments],
        meta=page_meta(page, page_size, total),
    )

@action_boundary("enroll client")
async def create_enrollment(
    session: Optional[SessionUser],
    db: Session,
    form: Union[dict, EnrollmentCreate]
) -> ActionResult:
    session = authorize(session, "enrollment:create")
    data = parse_form(EnrollmentCreate, form)

    enrollment = await EnrollmentService(db).create_enrollment(data, created_by_id=session.id)
    return ActionResult.ok(EnrollmentResponse.from_enrollment(enrollment), message="Client enrolled successfully")
