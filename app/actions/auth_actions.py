"""
Server actions for registration, login and admin user management
"""

from typing import Optional, Union
from sqlalchemy.orm import Session

from app.actions.common import normalize_paging, page_meta, parse_form
from app.auth.permissions import authorize
from app.schemas.common import ActionResult
from app.schemas.user import LoginForm, RegistrationForm, Role, RoleUpdate, SessionUser, UserResponse
from app.services.user_service import UserService
from app.utils.error_handler import UnauthorizedError, action_boundary

INVALID_CREDENTIALS = "Invalid email or password"

@action_boundary("register user")
async def register_user(db: Session, form: Union[dict, RegistrationForm]) -> ActionResult:
    """Doctor/Nurse self-registration"""
    data = parse_form(RegistrationForm, form)

    user = await UserService(db).register_user(data)
    return ActionResult.ok(UserResponse.model_validate(user), message="Registration successful")

@action_boundary("sign in")
async def login_user(db: Session, form: Union[dict, LoginForm]) -> ActionResult:
    """Check credentials; the session user in `data` is what the caller puts in the cookie"""
    data = parse_form(LoginForm, form)

    user = await UserService(db).authenticate_user(data)
    if not user:
        raise UnauthorizedError(INVALID_CREDENTIALS)
    return ActionResult.ok(SessionUser(id=user.id, email=user.email, name=user.name, role=user.role))

@action_boundary("fetch users")
async def list_users(
    session: Optional[SessionUser],
    db: Session,
    page: int = 1,
    page_size: int = 10,
    role: Optional[Role] = None
) -> ActionResult:
    authorize(session, "user:manage")
    page, page_size = normalize_paging(page, page_size)

    users, total = await UserService(db).get_users_paginated(page, page_size, role)
    return ActionResult.ok(
        [UserResponse.model_validate(u) for u in users],
        meta=page_meta(page, page_size, total),
    )

@action_boundary("update user role")
async def update_user_role(
    session: Optional[SessionUser],
    db: Session,
    user_id: int,
    role: Union[str, Role]
) -> ActionResult:
    authorize(session, "user:manage")
    data = RoleUpdate.model_validate({"role": role})

    user = await UserService(db).update_role(user_id, data.role)
    return ActionResult.ok(UserResponse.model_validate(user), message="Role updated successfully")
