"""
Program enrollment model
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, JSON, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class ProgramEnrollment(Base):
    """Association of a client to a health program"""
    __tablename__ = "program_enrollments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    # Emptied when the program is deleted
    program_id = Column(Integer, ForeignKey("health_programs.id"), nullable=True, index=True)
    enrollment_date = Column(Date, nullable=False)
    status = Column(String(20), default="active", nullable=False)  # active, completed, suspended
    program_specific_data = Column(JSON, default=dict, nullable=False)
    notes = Column(Text, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    client = relationship("Client", back_populates="enrollments")
    program = relationship("HealthProgram", back_populates="enrollments")

    __table_args__ = (
        # At most one active enrollment per client and program
        Index(
            "uq_active_enrollment",
            "client_id",
            "program_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    def __repr__(self):
        return f"<ProgramEnrollment(id={self.id}, client={self.client_id}, program={self.program_id}, status='{self.status}')>"
