"""
Error taxonomy and the two boundaries that convert errors for callers:
REST routes (JSON error bodies with an HTTP status) and server actions
(ActionResult envelopes)
"""

import functools
import uuid
import traceback
import logging
from typing import Optional, Dict, List
from datetime import datetime, timezone
from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.schemas.common import ActionResult, ErrorCode

logger = logging.getLogger(__name__)

class ErrorContext:
    """Context object for tracking error information across the request lifecycle"""

    def __init__(self, request: Request):
        self.request_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.user_agent = request.headers.get("user-agent")
        self.timestamp = datetime.now(timezone.utc)

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None

class AppError(Exception):
    """Base class for errors that map onto a response status"""
    status_code = 500
    error_code = ErrorCode.INTERNAL_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, List[str]]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

class UnauthorizedError(AppError):
    status_code = 401
    error_code = ErrorCode.UNAUTHORIZED
    default_message = "Unauthorized"

class ForbiddenError(AppError):
    status_code = 403
    error_code = ErrorCode.FORBIDDEN
    default_message = "Forbidden"

class BadRequestError(AppError):
    status_code = 400
    error_code = ErrorCode.BAD_REQUEST
    default_message = "Bad request"

class ValidationFailedError(AppError):
    """Schema rejection; details maps form field -> messages"""
    status_code = 422
    error_code = ErrorCode.VALIDATION_ERROR
    default_message = "Validation error"

class NotFoundError(AppError):
    status_code = 404
    error_code = ErrorCode.NOT_FOUND
    default_message = "Not found"

class ConflictError(AppError):
    status_code = 409
    error_code = ErrorCode.CONFLICT
    default_message = "Conflict"

class DatabaseError(AppError):
    """Custom exception for database-related errors"""
    default_message = "A database error occurred. Please try again later."

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)

def field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Group pydantic errors by the top-level form field they belong to"""
    details: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error.get("loc") else "_form"
        message = error["msg"]
        # "Value error, Passwords do not match" -> "Passwords do not match"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.setdefault(field, []).append(message)
    return details

class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def create_error_response(
        error_context: ErrorContext,
        error: Exception,
        include_details: bool = False
    ) -> JSONResponse:
        """Create a standardized error response"""
        status_code = error.status_code if isinstance(error, AppError) else 500

        error_data = {
            "error": {
                "code": ErrorHandler._get_error_code(error).value,
                "message": ErrorHandler._get_user_friendly_message(error),
                "request_id": error_context.request_id,
                "timestamp": error_context.timestamp.isoformat(),
                "endpoint": error_context.endpoint,
                "method": error_context.method
            }
        }
        if isinstance(error, AppError) and error.details:
            error_data["error"]["details"] = error.details

        # Include detailed error information in development
        if include_details:
            error_data["error"]["debug"] = {
                "original_error": str(error),
                "error_type": type(error).__name__,
                "stack_trace": traceback.format_exc()
            }

        ErrorHandler._log_error(error_context, error, status_code)

        return JSONResponse(
            status_code=status_code,
            content=error_data
        )

    @staticmethod
    def _get_error_code(error: Exception) -> ErrorCode:
        if isinstance(error, AppError):
            return error.error_code
        return ErrorCode.INTERNAL_ERROR

    @staticmethod
    def _get_user_friendly_message(error: Exception) -> str:
        if isinstance(error, DatabaseError):
            return error.default_message
        if isinstance(error, AppError):
            return error.message
        return "An unexpected error occurred. Please try again later."

    @staticmethod
    def _log_error(error_context: ErrorContext, error: Exception, status_code: int):
        """Log error with comprehensive context"""
        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"Error {error_context.request_id}: {type(error).__name__} in {error_context.method} {error_context.endpoint}",
            extra={
                "request_id": error_context.request_id,
                "endpoint": error_context.endpoint,
                "method": error_context.method,
                "status_code": status_code,
                "client_ip": error_context.client_ip,
                "user_agent": error_context.user_agent,
                "error_type": type(error).__name__,
                "error_message": str(error),
            }
        )

def action_boundary(action_name: str):
    """Decorator converting everything an action raises into an ActionResult"""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> ActionResult:
            try:
                return await func(*args, **kwargs)
            except AppError as e:
                if e.status_code >= 500:
                    error_id = str(uuid.uuid4())
                    logger.error(f"{action_name} failed [{error_id}]: {e}", exc_info=True)
                    return ActionResult.failure(
                        f"Failed to {action_name}", ErrorCode.INTERNAL_ERROR
                    )
                return ActionResult.failure(e.message, e.error_code, e.details)
            except ValidationError as e:
                return ActionResult.failure("Validation error", ErrorCode.VALIDATION_ERROR, field_errors(e))
            except Exception as e:
                error_id = str(uuid.uuid4())
                logger.error(f"{action_name} failed [{error_id}]: {type(e).__name__}: {e}", exc_info=True)
                return ActionResult.failure(f"Failed to {action_name}", ErrorCode.INTERNAL_ERROR)
        return wrapper
    return decorator
