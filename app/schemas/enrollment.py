"""
Pydantic schemas for program enrollments
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Literal, Optional
from datetime import date, datetime

EnrollmentStatus = Literal["active", "completed", "suspended"]

class EnrollmentCreate(BaseModel):
    """Schema for enrolling a client in a program"""
    client_id: int = Field(..., description="Client to enroll")
    program_id: int = Field(..., description="Program to enroll in")
    enrollment_date: date = Field(..., description="Enrollment date (YYYY-MM-DD)")
    status: EnrollmentStatus = "active"
    program_specific_data: Dict[str, Any] = Field(default_factory=dict)
    notes: Optional[str] = None

    @field_validator('program_specific_data', mode='before')
    @classmethod
    def default_data(cls, v):
        return {} if v is None else v

    @field_validator('notes', mode='before')
    @classmethod
    def blank_notes(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class EnrollmentResponse(BaseModel):
    """Enrollment with the name of its program flattened in"""
    id: int
    client_id: int
    program_id: Optional[int] = None
    program_name: str = ""
    enrollment_date: date
    status: EnrollmentStatus
    program_specific_data: Dict[str, Any] = Field(default_factory=dict)
    notes: Optional[str] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_enrollment(cls, enrollment) -> "EnrollmentResponse":
        return cls(
            id=enrollment.id,
            client_id=enrollment.client_id,
            program_id=enrollment.program_id,
            program_name=enrollment.program.name if enrollment.program else "",
            enrollment_date=enrollment.enrollment_date,
            status=enrollment.status,
            program_specific_data=enrollment.program_specific_data or {},
            notes=enrollment.notes,
            created_by_id=enrollment.created_by_id,
            created_at=enrollment.created_at,
            updated_at=enrollment.updated_at,
        )
