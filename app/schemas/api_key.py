"""
Pydantic schemas for API key management
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class ApiKeyCreate(BaseModel):
    """Owner is checked by the route so a missing one is a 400, not a 422"""
    owner: Optional[str] = None
    expires_in_days: Optional[int] = Field(None, alias="expiresInDays", ge=1)

    model_config = ConfigDict(populate_by_name=True)

class ApiKeyRevoke(BaseModel):
    api_key: Optional[str] = Field(None, alias="apiKey")

    model_config = ConfigDict(populate_by_name=True)

class ApiKeyInfo(BaseModel):
    id: int
    key: str
    owner: str
    created_at: Optional[datetime] = None
    last_used: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_revoked: bool

    model_config = ConfigDict(from_attributes=True)

class ApiKeyListResponse(BaseModel):
    keys: list[ApiKeyInfo]

class ApiKeyCreatedResponse(BaseModel):
    message: str
    api_key: str
