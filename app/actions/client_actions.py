"""
Server actions for client records.

Each action takes the caller's session explicitly, authorizes it before any
database access and returns an ActionResult instead of raising.
"""

from typing import Optional, Union
from sqlalchemy.orm import Session

from app.actions.common import normalize_paging, page_meta, parse_form
from app.auth.permissions import authorize
from app.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from app.schemas.common import ActionResult
from app.schemas.enrollment import EnrollmentResponse
from app.schemas.user import SessionUser
from app.services.client_service import ClientService
from app.services.enrollment_service import EnrollmentService
from app.utils.error_handler import action_boundary

@action_boundary("fetch client")
async def get_client(session: Optional[SessionUser], db: Session, client_id: int) -> ActionResult:
    """A client with its enrollments"""
    authorize(session, "client:read")

    client = await ClientService(db).get_client_or_404(client_id)
    enrollments = await EnrollmentService(db).get_client_enrollments(client.id)
    return ActionResult.ok({
        "client": ClientResponse.model_validate(client),
        "enrollments": [EnrollmentResponse.from_enrollment(e) for e in enrollments],
    })

@action_boundary("fetch clients")
async def get_clients(
    session: Optional[SessionUser],
    db: Session,
    page: int = 1,
    page_size: int = 10,
    search: Optional[str] = None
) -> ActionResult:
    """Newest clients first, or the tiered search when `search` is given"""
    authorize(session, "client:read")
    page, page_size = normalize_paging(page, page_size)
    service = ClientService(db)

    if search and search.strip():
        result = await service.search_clients(search, page, page_size)
        return ActionResult.ok(
            [ClientResponse.model_validate(c) for c in result.records],
            meta=page_meta(page, page_size, result.total_matches, result.tier),
        )

    clients, total = await service.list_clients(page, page_size)
    return ActionResult.ok(
        [ClientResponse.model_validate(c) for c in clients],
        meta=page_meta(page, page_size, total),
    )

@action_boundary("register client")
async def create_client(
    session: Optional[SessionUser],
    db: Session,
    form: Union[dict, ClientCreate]
) -> ActionResult:
    session = authorize(session, "client:create")
    data = parse_form(ClientCreate, form)

    client = await ClientService(db).create_client(data, created_by_id=session.id)
    return ActionResult.ok(ClientResponse.model_validate(client), message="Client registered successfully")

@action_boundary("update client")
async def update_client(
    session: Optional[SessionUser],
    db: Session,
    client_id: int,
    form: Union[dict, ClientUpdate]
) -> ActionResult:
    authorize(session, "client:update")
    data = parse_form(ClientUpdate, form)

    service = ClientService(db)
    client = await service.get_client_or_404(client_id)
    client = await service.update_client(client, data)
    return ActionResult.ok(ClientResponse.model_validate(client), message="Client updated successfully")

@action_boundary("delete client")
async def delete_client(session: Optional[SessionUser], db: Session, client_id: int) -> ActionResult:
    authorize(session, "client:delete")

    await ClientService(db).delete_client(client_id)
    return ActionResult.ok(message="Client deleted successfully")
