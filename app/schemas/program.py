"""
Pydantic schemas for health program operations
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime

def _clean_field_names(fields):
    """Strip names, drop blanks and duplicates, keep order"""
    cleaned = []
    for name in fields:
        name = name.strip()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned

class ProgramCreate(BaseModel):
    """Schema for creating a program"""
    name: str = Field(..., max_length=200)
    description: str
    code: str = Field(..., max_length=50)
    active: bool = True
    required_fields: List[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def name_required(cls, v):
        if not v.strip():
            raise ValueError('Program name is required')
        return v.strip()

    @field_validator('description')
    @classmethod
    def description_required(cls, v):
        if not v.strip():
            raise ValueError('Description is required')
        return v.strip()

    @field_validator('code')
    @classmethod
    def code_required(cls, v):
        if not v.strip():
            raise ValueError('Program code is required')
        return v.strip()

    @field_validator('required_fields')
    @classmethod
    def clean_required_fields(cls, v):
        return _clean_field_names(v)

class ProgramUpdate(BaseModel):
    """Schema for updating a program; only the fields sent are changed"""
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    code: Optional[str] = Field(None, max_length=50)
    active: Optional[bool] = None
    required_fields: Optional[List[str]] = None

    @field_validator('name', 'description', 'code')
    @classmethod
    def not_blank(cls, v, info):
        # Only runs for fields that were sent
        if v is None or not v.strip():
            labels = {'name': 'Program name', 'description': 'Description', 'code': 'Program code'}
            raise ValueError(f'{labels[info.field_name]} is required')
        return v.strip()

    @field_validator('required_fields')
    @classmethod
    def clean_required_fields(cls, v):
        return None if v is None else _clean_field_names(v)

class ProgramResponse(BaseModel):
    """Flattened program record"""
    id: int
    name: str
    description: str
    code: str
    active: bool
    required_fields: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ProgramListResponse(BaseModel):
    programs: list[ProgramResponse]
