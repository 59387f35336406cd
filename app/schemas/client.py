"""
Pydantic schemas for client operations
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Literal, Optional
from datetime import date, datetime

from app.schemas.enrollment import EnrollmentResponse

Gender = Literal["male", "female", "other"]

OPTIONAL_TEXT_FIELDS = (
    'national_id', 'phone', 'email', 'address',
    'emergency_contact_name', 'emergency_contact_relationship', 'emergency_contact_phone',
)

class ClientCreate(BaseModel):
    """Schema for registering a new client"""
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    date_of_birth: date = Field(..., description="Date of birth (YYYY-MM-DD)")
    gender: Gender
    national_id: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = Field(None, max_length=100)
    emergency_contact_relationship: Optional[str] = Field(None, max_length=50)
    emergency_contact_phone: Optional[str] = Field(None, max_length=30)

    @field_validator('first_name')
    @classmethod
    def first_name_required(cls, v):
        if not v or not v.strip():
            raise ValueError('First name is required')
        return v.strip()

    @field_validator('last_name')
    @classmethod
    def last_name_required(cls, v):
        if not v or not v.strip():
            raise ValueError('Last name is required')
        return v.strip()

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

class ClientUpdate(BaseModel):
    """Schema for editing a client; only the fields sent are changed"""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    national_id: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = Field(None, max_length=100)
    emergency_contact_relationship: Optional[str] = Field(None, max_length=50)
    emergency_contact_phone: Optional[str] = Field(None, max_length=30)

    # Validators only run for fields that were sent, so an explicit null lands here
    @field_validator('first_name')
    @classmethod
    def first_name_required(cls, v):
        if v is None or not v.strip():
            raise ValueError('First name is required')
        return v.strip()

    @field_validator('last_name')
    @classmethod
    def last_name_required(cls, v):
        if v is None or not v.strip():
            raise ValueError('Last name is required')
        return v.strip()

    @field_validator('date_of_birth', 'gender')
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name.replace("_", " ").capitalize()} is required')
        return v

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

class ClientResponse(BaseModel):
    """Full client record as returned by server actions"""
    id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    national_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int

    model_config = ConfigDict(from_attributes=True)

class ClientSummary(BaseModel):
    """Flattened projection used by the REST list endpoint"""
    id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    national_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class EmergencyContact(BaseModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None

class ClientDetail(ClientSummary):
    """Flattened projection used by the REST detail endpoint"""
    address: Optional[str] = None
    emergency_contact: EmergencyContact
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_client(cls, client) -> "ClientDetail":
        return cls(
            id=client.id,
            first_name=client.first_name,
            last_name=client.last_name,
            date_of_birth=client.date_of_birth,
            gender=client.gender,
            national_id=client.national_id,
            phone=client.phone,
            email=client.email,
            address=client.address,
            emergency_contact=EmergencyContact(
                name=client.emergency_contact_name,
                relationship=client.emergency_contact_relationship,
                phone=client.emergency_contact_phone,
            ),
            created_at=client.created_at,
            updated_at=client.updated_at,
        )

class Pagination(BaseModel):
    page: int
    page_size: int
    has_next_page: bool
    total_records: int
    total_pages: int

class ClientListResponse(BaseModel):
    """Schema for the paginated REST client list"""
    clients: list[ClientSummary]
    pagination: Pagination

class ClientDetailResponse(BaseModel):
    """Schema for the REST client detail"""
    client: ClientDetail
    enrollments: list[EnrollmentResponse]
