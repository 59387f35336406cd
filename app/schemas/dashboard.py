"""
Pydantic schemas for dashboard widgets
"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class DashboardStats(BaseModel):
    total_clients: int
    active_programs: int
    new_enrollments: int  # last 30 days

class MonthlyRegistration(BaseModel):
    name: str  # "Jan".."Dec"
    total: int

class ProgramDistribution(BaseModel):
    name: str
    value: int
    color: str

class RecentClientProgram(BaseModel):
    id: int
    name: str

class RecentClient(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    programs: List[RecentClientProgram]
    status: str
    last_updated: Optional[datetime] = None
