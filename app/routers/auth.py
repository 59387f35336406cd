"""
Authentication endpoints: registration, login/logout, Google sign-in and
admin user management
"""

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session
from typing import Optional
import hmac
import logging
import secrets

from app.actions import auth_actions
from app.actions.common import action_response
from app.auth.auth_handler import auth_handler, get_current_session, get_optional_session
from app.auth.oauth import GoogleOAuthClient, get_oauth_client
from app.config import settings
from app.database import get_db
from app.schemas.user import Role, SessionUser
from app.services.activity_logger import ActivityLogger
from app.services.user_service import UserService
from app.utils.error_handler import UnauthorizedError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_COOKIE = "oauth-state"
OAUTH_STATE_MAX_AGE = 10 * 60

@router.post("/register")
@limiter.limit("5/minute")  # Strict limit to prevent spam registrations
async def register(
    request: Request,
    form: dict = Body(...),
    db: Session = Depends(get_db)
):
    """Register a Doctor or Nurse account"""
    result = await auth_actions.register_user(db, form)

    await ActivityLogger(db).log_request(
        request,
        result.http_status,
        actor=result.data.email if result.success else None,
        error_message=result.error,
    )
    return action_response(result, status_code=201 if result.success else None)

@router.post("/login")
@limiter.limit("10/minute")  # Prevent brute force attacks
async def login(
    request: Request,
    form: dict = Body(...),
    db: Session = Depends(get_db)
):
    """Check credentials and set the session cookie"""
    result = await auth_actions.login_user(db, form)

    await ActivityLogger(db).log_request(
        request,
        result.http_status,
        actor=result.data.email if result.success else form.get("email"),
        error_message=result.error,
    )

    response = action_response(result)
    if result.success:
        auth_handler.set_session_cookie(response, result.data)
    return response

@router.post("/logout")
@limiter.limit("30/minute")
async def logout(
    request: Request,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    """Clear the session cookie; always succeeds"""
    if session:
        await ActivityLogger(db).log_request(request, 200, actor=session.email)
        logger.info(f"User logged out: {session.email}")

    response = JSONResponse({"message": "Successfully logged out"})
    auth_handler.clear_session_cookie(response)
    return response

@router.get("/me", response_model=SessionUser)
@limiter.limit("30/minute")
async def me(
    request: Request,
    session: SessionUser = Depends(get_current_session)
):
    """The signed-in user"""
    return session

@router.get("/google/login")
@limiter.limit("10/minute")
async def google_login(
    request: Request,
    oauth: GoogleOAuthClient = Depends(get_oauth_client)
):
    """Start the Google authorization-code flow"""
    state = secrets.token_urlsafe(32)
    response = RedirectResponse(oauth.authorization_url(state), status_code=302)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        secure=settings.is_production,
        max_age=OAUTH_STATE_MAX_AGE,
        samesite="lax",
    )
    return response

@router.get("/google/callback")
@limiter.limit("10/minute")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
    db: Session = Depends(get_db)
):
    """Finish the Google flow: link or create the user and sign them in"""
    activity_logger = ActivityLogger(db)

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if error or not code:
        await activity_logger.log_request(request, 401, error_message=f"OAuth error: {error or 'missing code'}")
        raise UnauthorizedError("OAuth sign-in was cancelled or failed")
    if not state or not expected_state or not hmac.compare_digest(state, expected_state):
        await activity_logger.log_request(request, 401, error_message="OAuth state mismatch")
        raise UnauthorizedError("Invalid OAuth state")

    profile = await oauth.authenticate(code)
    user = await UserService(db).link_oauth_account(profile)

    await activity_logger.log_request(request, 302, actor=user.email)
    logger.info(f"{profile.provider} sign-in for user: {user.email}")

    response = RedirectResponse(settings.POST_LOGIN_REDIRECT, status_code=302)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    auth_handler.set_session_cookie(
        response, SessionUser(id=user.id, email=user.email, name=user.name, role=user.role)
    )
    return response

# Admin endpoints
@router.get("/users")
@limiter.limit("20/minute")
async def get_users(
    request: Request,
    page: int = 1,
    page_size: int = 10,
    role: Optional[Role] = None,
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    """Get paginated list of users (Admin only)"""
    result = await auth_actions.list_users(session, db, page, page_size, role)
    return action_response(result)

@router.patch("/users/{user_id}/role")
@limiter.limit("10/minute")
async def change_user_role(
    request: Request,
    user_id: int,
    form: dict = Body(...),
    session: Optional[SessionUser] = Depends(get_optional_session),
    db: Session = Depends(get_db)
):
    """Change a user's role (Admin only)"""
    result = await auth_actions.update_user_role(session, db, user_id, form.get("role"))
    if result.success:
        await ActivityLogger(db).log_request(request, 200, actor=session.email)
        logger.info(f"Admin {session.email} set role of user {user_id} to {result.data.role.value}")
    return action_response(result)
