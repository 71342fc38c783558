"""
Base repository with standardized async CRUD operations.

Repositories never commit; the calling service owns the transaction.
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.core.logging import get_logger
from hostel_ledger.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class AuditContext:
    """Context for audit trail information."""

    USER_AGENT_MAX_LENGTH = 255

    def __init__(
        self,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        self.ip_address = ip_address
        self.user_agent = user_agent[:self.USER_AGENT_MAX_LENGTH] if user_agent else None
        self.request_id = request_id
        self.metadata = metadata or {}
        self.timestamp = datetime.utcnow()

    @classmethod
    def from_headers(
        cls,
        headers: Dict[str, str],
        client_host: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> "AuditContext":
        """
        Build context from request headers.

        The first ``X-Forwarded-For`` hop wins over the socket peer address.
        """
        forwarded = headers.get("x-forwarded-for")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip() or client_host
        else:
            ip_address = client_host
        return cls(
            ip_address=ip_address,
            user_agent=headers.get("user-agent"),
            request_id=request_id,
        )


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.

    Provides CRUD helpers over an ``AsyncSession`` for all domain repositories.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    # ==================== Read Operations ====================

    async def get_by_id(self, entity_id: int, for_update: bool = False) -> Optional[ModelType]:
        """
        Get entity by primary key.

        Args:
            entity_id: Primary key
            for_update: Lock the row until the transaction ends

        Returns:
            Entity or None
        """
        stmt = select(self.model).where(self.model.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_one(self, *criteria) -> Optional[ModelType]:
        stmt = select(self.model).where(*criteria).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find_all(
        self,
        *criteria,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Find entities matching all criteria.

        Args:
            criteria: SQLAlchemy filter expressions
            order_by: Ordering expressions
            limit: Maximum rows
            offset: Rows to skip

        Returns:
            List of entities
        """
        stmt = select(self.model).where(*criteria)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, *criteria) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        result = await self.session.execute(stmt)
        return int(result.scalar_one() or 0)

    # ==================== Write Operations ====================

    async def create(self, data: Dict[str, Any]) -> ModelType:
        """
        Create new entity and flush it so its id is available.

        Args:
            data: Column values

        Returns:
            Created entity
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        logger.debug("Entity created", extra={
            'entity_type': self.model.__name__,
            'entity_id': entity.id,
        })
        return entity

    async def update(self, entity: ModelType, data: Dict[str, Any]) -> ModelType:
        for key, value in data.items():
            setattr(entity, key, value)
        await self.session.flush()
        return entity

    async def delete(self, entity: ModelType) -> None:
        """Hard delete an entity."""
        await self.session.delete(entity)
        await self.session.flush()
        logger.debug("Entity deleted", extra={
            'entity_type': self.model.__name__,
            'entity_id': entity.id,
        })
