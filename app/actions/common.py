"""
Helpers shared by the server actions
"""

from typing import Optional, Type, TypeVar, Union
import math

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.schemas.common import ActionResult, PageMeta

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10

FormT = TypeVar("FormT", bound=BaseModel)

def parse_form(schema: Type[FormT], form: Union[dict, FormT]) -> FormT:
    """Accept either raw form data or an already validated model"""
    if isinstance(form, schema):
        return form
    return schema.model_validate(form or {})

def normalize_paging(page: int, page_size: int) -> tuple[int, int]:
    if page < 1:
        page = 1
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size

def page_meta(page: int, page_size: int, total: int, search_tier: Optional[str] = None) -> PageMeta:
    return PageMeta(
        page=page,
        page_size=page_size,
        total_records=total,
        total_pages=math.ceil(total / page_size) if total else 0,
        search_tier=search_tier,
    )

def action_response(result: ActionResult, status_code: Optional[int] = None) -> JSONResponse:
    """Render an ActionResult over HTTP with the status its error code maps to"""
    return JSONResponse(
        status_code=status_code or result.http_status,
        content=result.model_dump(mode="json"),
    )
