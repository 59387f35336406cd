"""
Pydantic schemas for user and authentication operations
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from typing import Literal, Optional
from datetime import datetime
from enum import Enum
import re

class Role(str, Enum):
    """Staff roles; every gated operation is checked against these"""
    ADMIN = "Admin"
    DOCTOR = "Doctor"
    NURSE = "Nurse"

def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v

class RegistrationForm(BaseModel):
    """Schema for Doctor/Nurse self-registration"""
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Valid email address")
    password: str = Field(..., description="Password (minimum 8 characters)")
    confirm_password: str = Field(..., description="Password confirmation")
    role: Literal["Doctor", "Nurse"] = Field(..., description="Registering role")
    facility_name: str = Field(..., description="Facility the user works at")
    facility_address: Optional[str] = Field(None, max_length=255)
    facility_phone: Optional[str] = Field(None, max_length=30)
    facility_email: Optional[EmailStr] = Field(None, description="Facility contact email")
    license_number: str = Field(..., description="Professional license number")
    specialization: Optional[str] = Field(None, max_length=100)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError('Name must be at least 2 characters')
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator('password', 'confirm_password')
    @classmethod
    def validate_password_length(cls, v):
        if len(v) < 8:
            raise ValueError('Password must be at least 8 characters')
        return v

    @field_validator('confirm_password')
    @classmethod
    def passwords_match(cls, v, info: ValidationInfo):
        if 'password' in info.data and v != info.data['password']:
            raise ValueError('Passwords do not match')
        return v

    @field_validator('facility_name')
    @classmethod
    def validate_facility_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError('Facility name is required')
        return v

    @field_validator('license_number')
    @classmethod
    def validate_license_number(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError('License number is required')
        return v

    @field_validator('facility_address', 'facility_phone', 'facility_email', 'specialization', mode='before')
    @classmethod
    def empty_optional(cls, v):
        return _blank_to_none(v)

    @field_validator('facility_phone')
    @classmethod
    def phone_digits(cls, v):
        if v is None:
            return v
        digits_only = re.sub(r'\D', '', v)
        return digits_only or None

class LoginForm(BaseModel):
    """Schema for email/password login"""
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., description="Password")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator('password')
    @classmethod
    def password_required(cls, v):
        if not v:
            raise ValueError('Password is required')
        return v

class SessionUser(BaseModel):
    """Identity carried by the session token"""
    id: int
    email: str
    name: Optional[str] = None
    role: Role

class RoleUpdate(BaseModel):
    role: Role

class UserResponse(BaseModel):
    """Schema for user responses (excludes sensitive data)"""
    id: int
    name: Optional[str]
    email: str
    role: Role
    facility_id: Optional[int] = None
    oauth_provider: Optional[str] = None
    license_number: Optional[str] = None
    specialization: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
