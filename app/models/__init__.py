from app.models.facility import Facility
from app.models.user import User
from app.models.client import Client
from app.models.program import HealthProgram
from app.models.enrollment import ProgramEnrollment
from app.models.api_key import ApiKey
from app.models.activity_log import ActivityLog

__all__ = [
    "Facility",
    "User",
    "Client",
    "HealthProgram",
    "ProgramEnrollment",
    "ApiKey",
    "ActivityLog",
]
