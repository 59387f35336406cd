"""
Enrollment repository.

Creating an enrollment checks, in order: the client exists, the program
exists, the client has no active enrollment in the program, and every field
the program requires is filled in. A partial unique index backs the
duplicate check when two requests race.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from typing import Optional
import logging

from app.models.client import Client
from app.models.enrollment import ProgramEnrollment
from app.models.program import HealthProgram
from app.schemas.enrollment import EnrollmentCreate
from app.utils.error_handler import (
    AppError, ConflictError, DatabaseError, NotFoundError, ValidationFailedError
)

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "Client is already enrolled in this program"

def missing_required_fields(required_fields: list[str], data: dict) -> dict[str, list[str]]:
    """Required field -> message for every field that is absent or blank"""
    missing = {}
    for name in required_fields or []:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing[name] = [f"{name} is required"]
    return missing

class EnrollmentService:
    """Service for program enrollments"""

    def __init__(self, db: Session):
        self.db = db

    def _with_program(self):
        return self.db.query(ProgramEnrollment).options(joinedload(ProgramEnrollment.program))

    async def get_client_enrollments(self, client_id: int) -> list[ProgramEnrollment]:
        """All enrollments of one client, most recent enrollment date first"""
        return (
            self._with_program()
            .filter(ProgramEnrollment.client_id == client_id)
            .order_by(ProgramEnrollment.enrollment_date.desc(), ProgramEnrollment.id.desc())
            .all()
        )

    async def get_enrollments(
        self,
        client_id: Optional[int] = None,
        program_id: Optional[int] = None,
        page: int = 1,
        page_size: int = 10
    ) -> tuple[list[ProgramEnrollment], int]:
        """Paginated enrollments filtered by client and/or program"""
        try:
            query = self.db.query(ProgramEnrollment)
            if client_id is not None:
                query = query.filter(ProgramEnrollment.client_id == client_id)
            if program_id is not None:
                query = query.filter(ProgramEnrollment.program_id == program_id)

            total = query.count()
            offset = (page - 1) * page_size
            enrollments = (
                query.options(joinedload(ProgramEnrollment.program))
                .order_by(ProgramEnrollment.enrollment_date.desc(), ProgramEnrollment.id.desc())
                .offset(offset)
                .limit(page_size)
                .all()
            )
            return enrollments, total

        except Exception as e:
            logger.error(f"Failed to list enrollments: {e}")
            raise DatabaseError(f"Failed to retrieve enrollments: {str(e)}", e)

    async def has_active_enrollment(self, client_id: int, program_id: int) -> bool:
        return self.db.query(
            self.db.query(ProgramEnrollment).filter(
                ProgramEnrollment.client_id == client_id,
                ProgramEnrollment.program_id == program_id,
                ProgramEnrollment.status == "active",
            ).exists()
        ).scalar()

    async def create_enrollment(self, data: EnrollmentCreate, created_by_id: Optional[int] = None) -> ProgramEnrollment:
        try:
            client = self.db.query(Client).filter(Client.id == data.client_id).first()
            if not client:
                raise NotFoundError("Client not found")

            program = self.db.query(HealthProgram).filter(HealthProgram.id == data.program_id).first()
            if not program:
                raise NotFoundError("Program not found")

            if await self.has_active_enrollment(client.id, program.id):
                raise ConflictError(ALREADY_ENROLLED)

            missing = missing_required_fields(program.required_fields, data.program_specific_data)
            if missing:
                raise ValidationFailedError("Missing required program fields", details=missing)

            enrollment = ProgramEnrollment(**data.model_dump(), created_by_id=created_by_id)
            self.db.add(enrollment)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise ConflictError(ALREADY_ENROLLED)
            self.db.refresh(enrollment)

            logger.info(f"Enrolled client {client.id} in program {program.code} (enrollment {enrollment.id})")
            return enrollment

        except AppError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create enrollment: {e}")
            raise DatabaseError(f"Failed to create enrollment: {str(e)}", e)
