"""
Health program model
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class HealthProgram(Base):
    """Program definition; required_fields extend the enrollment form"""
    __tablename__ = "health_programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    code = Column(String(50), nullable=False, index=True)
    active = Column(Boolean, default=True, nullable=False)
    required_fields = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    enrollments = relationship("ProgramEnrollment", back_populates="program")

    def __repr__(self):
        return f"<HealthProgram(id={self.id}, code='{self.code}', active={self.active})>"
