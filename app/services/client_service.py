"""
Client repository: CRUD over the clients table plus search
"""

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from typing import Optional
import logging

from app.models.client import Client
from app.schemas.client import ClientCreate, ClientUpdate
from app.services.client_search import ClientSearch, SearchPage
from app.utils.error_handler import AppError, ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

class ClientService:
    """Service for client records"""

    def __init__(self, db: Session):
        self.db = db

    async def get_client(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(Client.id == client_id).first()

    async def get_client_or_404(self, client_id: int) -> Client:
        client = await self.get_client(client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    async def list_clients(self, page: int = 1, page_size: int = 10) -> tuple[list[Client], int]:
        """Newest first, with an authoritative total"""
        try:
            query = self.db.query(Client)
            total = query.count()
            offset = (page - 1) * page_size
            clients = (
                query.order_by(Client.created_at.desc(), Client.id.desc())
                .offset(offset)
                .limit(page_size)
                .all()
            )
            return clients, total
        except Exception as e:
            logger.error(f"Failed to list clients: {e}")
            raise DatabaseError(f"Failed to retrieve clients: {str(e)}", e)

    async def search_clients(self, query: str, page: int = 1, page_size: int = 10) -> SearchPage:
        try:
            return ClientSearch(self.db).search(query, page, page_size)
        except Exception as e:
            logger.error(f"Client search failed: {e}")
            raise DatabaseError(f"Failed to search clients: {str(e)}", e)

    async def create_client(self, data: ClientCreate, created_by_id: Optional[int] = None) -> Client:
        try:
            client = Client(**data.model_dump(), created_by_id=created_by_id)
            self.db.add(client)
            self.db.commit()
            self.db.refresh(client)

            logger.info(f"Created client with ID: {client.id}")
            return client

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create client: {e}")
            raise DatabaseError(f"Failed to create client: {str(e)}", e)

    async def update_client(self, client: Client, data: ClientUpdate) -> Client:
        """Apply the fields that were sent; a concurrent edit is a conflict"""
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(client, field, value)

            self.db.commit()
            self.db.refresh(client)

            logger.info(f"Updated client with ID: {client.id} (version {client.version})")
            return client

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("Client was modified by someone else, reload and try again")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update client {client.id}: {e}")
            raise DatabaseError(f"Failed to update client: {str(e)}", e)

    async def delete_client(self, client_id: int) -> None:
        """Hard delete; enrollments go with the client"""
        try:
            client = await self.get_client_or_404(client_id)
            self.db.delete(client)
            self.db.commit()

            logger.info(f"Deleted client with ID: {client_id}")

        except AppError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete client {client_id}: {e}")
            raise DatabaseError(f"Failed to delete client: {str(e)}", e)
