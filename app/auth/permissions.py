"""
Role-based access control.

Every gated operation names an entry in PERMISSIONS. `authorize` is pure:
it only inspects the session it is handed, so actions call it before they
touch the database.
"""

from typing import Dict, FrozenSet, Optional

from fastapi import Depends

from app.auth.auth_handler import get_optional_session
from app.schemas.user import Role, SessionUser
from app.utils.error_handler import ForbiddenError, UnauthorizedError

ALL_STAFF = frozenset({Role.ADMIN, Role.DOCTOR, Role.NURSE})

PERMISSIONS: Dict[str, FrozenSet[Role]] = {
    "client:read": ALL_STAFF,
    "client:create": ALL_STAFF,
    "client:update": ALL_STAFF,
    "client:delete": frozenset({Role.DOCTOR}),
    "program:read": ALL_STAFF,
    "program:create": ALL_STAFF,
    "program:update": frozenset({Role.ADMIN, Role.DOCTOR}),
    "program:delete": frozenset({Role.ADMIN, Role.DOCTOR}),
    "enrollment:read": ALL_STAFF,
    "enrollment:create": ALL_STAFF,
    "dashboard:read": ALL_STAFF,
    "user:manage": frozenset({Role.ADMIN}),
    "api_key:manage": frozenset({Role.ADMIN}),
}

def is_allowed(session: Optional[SessionUser], operation: str) -> bool:
    if session is None:
        return False
    return session.role in PERMISSIONS[operation]

def authorize(session: Optional[SessionUser], operation: str) -> SessionUser:
    """Raise Unauthorized without a session, Forbidden for a role outside the allow-list"""
    if session is None:
        raise UnauthorizedError("Unauthorized")
    if session.role not in PERMISSIONS[operation]:
        raise ForbiddenError("Forbidden")
    return session

class RoleChecker:
    """Route dependency wrapping `authorize` for one operation"""

    def __init__(self, operation: str):
        if operation not in PERMISSIONS:
            raise KeyError(f"Unknown operation: {operation}")
        self.operation = operation

    def __call__(self, session: Optional[SessionUser] = Depends(get_optional_session)) -> SessionUser:
        return authorize(session, self.operation)

# Common role checkers
api_key_admin_required = RoleChecker("api_key:manage")
