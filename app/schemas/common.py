"""
Shared response envelopes
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

class ErrorCode(str, Enum):
    """Tag carried by every failed ActionResult"""
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

HTTP_STATUS_BY_CODE = {
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}

class PageMeta(BaseModel):
    """Pagination metadata for list results"""
    page: int
    page_size: int
    total_records: int
    total_pages: int
    # Which search tier produced the page; None for plain listings
    search_tier: Optional[str] = None

class ActionResult(BaseModel):
    """Result of a server action: success with data, or a tagged failure"""
    success: bool
    data: Optional[Any] = None
    meta: Optional[PageMeta] = None
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    details: Optional[Dict[str, List[str]]] = None

    @classmethod
    def ok(cls, data: Any = None, meta: Optional[PageMeta] = None, message: Optional[str] = None) -> "ActionResult":
        return cls(success=True, data=data, meta=meta, message=message)

    @classmethod
    def failure(
        cls,
        error: str,
        code: ErrorCode,
        details: Optional[Dict[str, List[str]]] = None
    ) -> "ActionResult":
        return cls(success=False, error=error, code=code, details=details)

    @property
    def http_status(self) -> int:
        if self.success:
            return 200
        return HTTP_STATUS_BY_CODE.get(self.code, 500)
