"""
Health program repository
"""

from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.models.program import HealthProgram
from app.schemas.program import ProgramCreate, ProgramUpdate
from app.utils.error_handler import AppError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

class ProgramService:
    """Service for health program definitions"""

    def __init__(self, db: Session):
        self.db = db

    async def get_program(self, program_id: int) -> Optional[HealthProgram]:
        return self.db.query(HealthProgram).filter(HealthProgram.id == program_id).first()

    async def get_program_or_404(self, program_id: int) -> HealthProgram:
        program = await self.get_program(program_id)
        if not program:
            raise NotFoundError("Program not found")
        return program

    async def list_programs(self, active_only: bool = False) -> list[HealthProgram]:
        """Programs sorted by name"""
        try:
            query = self.db.query(HealthProgram)
            if active_only:
                query = query.filter(HealthProgram.active.is_(True))
            return query.order_by(HealthProgram.name.asc(), HealthProgram.id.asc()).all()
        except Exception as e:
            logger.error(f"Failed to list programs: {e}")
            raise DatabaseError(f"Failed to retrieve programs: {str(e)}", e)

    async def create_program(self, data: ProgramCreate) -> HealthProgram:
        try:
            program = HealthProgram(**data.model_dump())
            self.db.add(program)
            self.db.commit()
            self.db.refresh(program)

            logger.info(f"Created program {program.code} with ID: {program.id}")
            return program

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create program: {e}")
            raise DatabaseError(f"Failed to create program: {str(e)}", e)

    async def update_program(self, program: HealthProgram, data: ProgramUpdate) -> HealthProgram:
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                # active/required_fields sent as null leave the stored value alone
                if value is None:
                    continue
                setattr(program, field, value)

            self.db.commit()
            self.db.refresh(program)

            logger.info(f"Updated program with ID: {program.id}")
            return program

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update program {program.id}: {e}")
            raise DatabaseError(f"Failed to update program: {str(e)}", e)

    async def delete_program(self, program_id: int) -> None:
        """Delete a program; its enrollments stay with an empty program reference"""
        try:
            program = await self.get_program_or_404(program_id)
            self.db.delete(program)
            self.db.commit()

            logger.info(f"Deleted program with ID: {program_id}")

        except AppError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete program {program_id}: {e}")
            raise DatabaseError(f"Failed to delete program: {str(e)}", e)
